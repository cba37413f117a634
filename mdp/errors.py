class MDPError(Exception):
    """Base class for errors raised by the MDP core."""


class ModelInconsistencyError(MDPError, ValueError):
    """
    The supplied model breaks its contract: probabilities that do not sum to 1,
    a legal action without outcomes, a dead end not marked terminal...
    """


class UnreachableModelError(MDPError, ValueError):
    """The initial state has no actions and is not marked terminal."""


class NoActionDefinedError(MDPError, KeyError):
    """A policy was queried on a terminal or unknown state."""

    def __init__(self, state):
        super().__init__(state)
        self.state = state

    def __str__(self):
        return f"no action defined for state {self.state!r}"
