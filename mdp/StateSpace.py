import logging
import math
from collections import deque

from mdp.errors import ModelInconsistencyError, UnreachableModelError

log = logging.getLogger(__name__)

PROBABILITY_TOLERANCE = 1e-9


class StateSpace:
    """
    Every state reachable from an initial state, discovered once and then
    immutable.

    States live in an arena: ``states[i]`` is the state with index ``i`` and
    ``index[state] == i``. Successors are stored per state and per action as
    ``(probability, next_index, reward)`` tuples, so cyclic models never
    create cycles between Python objects.
    """

    def __init__(self, states, actions, outcomes, max_states):
        self.states = tuple(states)
        self.index = {s: i for i, s in enumerate(self.states)}
        self._actions = tuple(actions)
        self._outcomes = tuple(outcomes)
        self._max_states = tuple(max_states)

    @classmethod
    def from_model(cls, model, initial_state=None):
        """
        Breadth-first traversal of ``model`` from its initial state.

        The model is validated as it is explored; any contract violation
        raises before a solver ever sees the space.
        """
        start = model.initial_state() if initial_state is None else initial_state

        states = [start]
        index = {start: 0}
        actions = []
        outcomes = []
        max_states = []

        queue = deque([start])
        while queue:
            state = queue.popleft()
            if model.is_terminal(state):
                legal = ()
            else:
                legal = tuple(model.actions(state))
                if not legal:
                    if index[state] == 0:
                        raise UnreachableModelError(
                            f"initial state {state!r} has no actions and is not terminal")
                    raise ModelInconsistencyError(
                        f"state {state!r} has no actions and is not terminal")
                if len(set(legal)) != len(legal):
                    raise ModelInconsistencyError(f"duplicate actions at state {state!r}: {legal!r}")

            per_action = []
            for a in legal:
                outs = _validated_outcomes(model, state, a)
                linked = []
                for p, s_next, r in outs:
                    if s_next not in index:
                        index[s_next] = len(states)
                        states.append(s_next)
                        queue.append(s_next)
                    linked.append((p, index[s_next], r))
                per_action.append(tuple(linked))

            actions.append(legal)
            outcomes.append(tuple(per_action))
            max_states.append(bool(model.is_max_state(state)))

        space = cls(states, actions, outcomes, max_states)
        log.debug('Enumerated %d states (%d terminal)', len(space), len(space.states) - len(space.non_terminal()))
        return space

    def __len__(self):
        return len(self.states)

    def __contains__(self, state):
        return state in self.index

    def __iter__(self):
        return iter(self.states)

    @property
    def initial_state(self):
        return self.states[0]

    def actions_of(self, state):
        """Ordered legal actions at state; empty for terminal states."""
        return self._actions[self._index_of(state)]

    def is_terminal(self, state):
        return not self._actions[self._index_of(state)]

    def is_max_state(self, state):
        return self._max_states[self._index_of(state)]

    def outcomes(self, state, action):
        """Validated (probability, next_state, reward) triples for a legal action."""
        i = self._index_of(state)
        try:
            k = self._actions[i].index(action)
        except ValueError:
            raise ModelInconsistencyError(f"action {action!r} is not legal at state {state!r}") from None
        return [(p, self.states[j], r) for p, j, r in self._outcomes[i][k]]

    def is_acyclic(self):
        """True when no state can be revisited (self-loops count as cycles)."""
        # 0 unvisited, 1 on the DFS stack, 2 finished
        colour = [0] * len(self.states)
        for root in range(len(self.states)):
            if colour[root]:
                continue
            colour[root] = 1
            stack = [(root, self._next_indices(root))]
            while stack:
                i, pending = stack[-1]
                j = next(pending, None)
                if j is None:
                    colour[i] = 2
                    stack.pop()
                elif colour[j] == 1:
                    return False
                elif colour[j] == 0:
                    colour[j] = 1
                    stack.append((j, self._next_indices(j)))
        return True

    def _next_indices(self, i):
        return iter({j for per_action in self._outcomes[i] for _p, j, _r in per_action})

    def non_terminal(self):
        """Indices of the states that have at least one action."""
        return [i for i, legal in enumerate(self._actions) if legal]

    # index-based access used by the solvers

    def actions_at(self, i):
        return self._actions[i]

    def outcomes_at(self, i):
        return self._outcomes[i]

    def maximizes_at(self, i):
        return self._max_states[i]

    def _index_of(self, state):
        try:
            return self.index[state]
        except KeyError:
            raise KeyError(f"state {state!r} is not in the state space") from None


def enumerate_states(model, initial_state=None):
    """Return the set of states reachable from the initial state."""
    return frozenset(StateSpace.from_model(model, initial_state).states)


def _validated_outcomes(model, state, action):
    outs = [tuple(o) for o in model.transitions(state, action)]
    if not outs:
        raise ModelInconsistencyError(f"action {action!r} at state {state!r} has no outcomes")

    total = 0.0
    checked = []
    for o in outs:
        if len(o) != 3:
            raise ModelInconsistencyError(
                f"outcome {o!r} of action {action!r} at state {state!r} is not (probability, next_state, reward)")
        p, s_next, r = o
        p = float(p)
        r = float(r)
        if not math.isfinite(p) or p < 0.0:
            raise ModelInconsistencyError(
                f"invalid probability {p!r} for action {action!r} at state {state!r}")
        if not math.isfinite(r):
            raise ModelInconsistencyError(
                f"invalid reward {r!r} for action {action!r} at state {state!r}")
        total += p
        checked.append((p, s_next, r))

    if abs(total - 1.0) > PROBABILITY_TOLERANCE:
        raise ModelInconsistencyError(
            f"probabilities for action {action!r} at state {state!r} sum to {total!r}, not 1")
    return checked
