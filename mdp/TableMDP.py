from collections import namedtuple

from mdp.errors import ModelInconsistencyError
from mdp.MDP import MDP

# Transition between states given an action
StateLink = namedtuple('StateLink', ['state', 'next_state', 'action', 'probability', 'reward'])


class TableMDP(MDP):
    """
    MDP written out as an explicit list of links.

    Every state that only appears as a ``next_state`` is terminal. Actions at
    a state are ordered by their first appearance in the list. The initial
    state defaults to the source of the first link.
    """

    def __init__(self, links, initial_state=None, min_states=()):
        links = [StateLink(*link) for link in links]
        if not links and initial_state is None:
            raise ModelInconsistencyError("a link table needs at least one link or an initial state")

        self._initial = links[0].state if initial_state is None else initial_state
        self._min_states = frozenset(min_states)
        self._table = {}
        for link in links:
            by_action = self._table.setdefault(link.state, {})
            outcomes = by_action.setdefault(link.action, {})
            if link.next_state in outcomes:
                raise ModelInconsistencyError(
                    f"duplicate link {link.state!r} -[{link.action!r}]-> {link.next_state!r}")
            outcomes[link.next_state] = (float(link.probability), float(link.reward))

    def initial_state(self):
        return self._initial

    def actions(self, state):
        return list(self._table.get(state, {}))

    def transitions(self, state, action):
        outcomes = self._table[state][action]
        return [(p, s_next, r) for s_next, (p, r) in outcomes.items()]

    def is_terminal(self, state):
        return state not in self._table

    def is_max_state(self, state):
        return state not in self._min_states
