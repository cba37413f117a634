from collections.abc import Mapping
from types import MappingProxyType

import numpy as np

from mdp.errors import NoActionDefinedError


class ValueTable:
    """
    State -> value estimate, stored as a float64 array aligned with the
    state-space arena.

    The solver mutates ``array`` in place while it runs and freezes the
    table before handing it out.
    """

    def __init__(self, space, prior=None):
        self.space = space
        self.array = np.zeros(len(space), dtype=np.float64)
        if prior is not None:
            for state, value in prior.items():
                if state in space:
                    self.array[space.index[state]] = float(value)
        # terminal states are absorbing and carry no future reward
        for i in range(len(space)):
            if not space.actions_at(i):
                self.array[i] = 0.0

    def __getitem__(self, state):
        return float(self.array[self.space.index[state]])

    def __len__(self):
        return len(self.array)

    def __contains__(self, state):
        return state in self.space

    def value(self, state):
        return self[state]

    def as_dict(self):
        return {s: float(v) for s, v in zip(self.space.states, self.array)}

    def freeze(self):
        self.array.flags.writeable = False
        return self

    def max_abs_diff(self, other):
        return float(np.max(np.abs(self.array - other.array), initial=0.0))


class PolicyTable(Mapping):
    """
    Immutable state -> action mapping produced by a solver.

    Terminal states have no entry; querying them (or a state the solver never
    saw) raises NoActionDefinedError.
    """

    def __init__(self, actions):
        self._actions = MappingProxyType(dict(actions))

    def action_for(self, state):
        try:
            return self._actions[state]
        except KeyError:
            raise NoActionDefinedError(state) from None

    def __getitem__(self, state):
        return self.action_for(state)

    def __iter__(self):
        return iter(self._actions)

    def __len__(self):
        return len(self._actions)

    def __repr__(self):
        return f"PolicyTable({len(self)} states)"
