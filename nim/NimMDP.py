from mdp.MDP import MDP

AGENT = 1
OPPONENT = -1


def loser_payoff(mover):
    """Agent's payoff when ``mover`` takes the last stone (misere: the taker loses)."""
    return 1.0 if mover == OPPONENT else -1.0


class NimMDP(MDP):
    """
    Misere Nim: players alternately remove 1..max_take stones and whoever
    takes the last stone loses.

    States are (stones, mover) where mover is AGENT (maximising) or OPPONENT
    (minimising). The only reward is paid on the move that empties the pile.
    """

    def __init__(self, max_stones=21, max_take=3, first_player=AGENT):
        if first_player not in (AGENT, OPPONENT):
            raise ValueError(f"first_player must be {AGENT} or {OPPONENT}, got {first_player!r}")
        self.max_stones = int(max_stones)
        self.max_take = int(max_take)
        self.first_player = first_player

    def initial_state(self):
        return self.max_stones, self.first_player

    def actions(self, state):
        pile = state[0]
        return list(range(1, min(pile, self.max_take) + 1))

    def transitions(self, state, action):
        pile, mover = state
        left = pile - action
        payoff = loser_payoff(mover) if left == 0 else 0.0
        return [(1.0, (left, -mover), payoff)]

    def is_terminal(self, state):
        return state[0] == 0

    def is_max_state(self, state):
        return state[1] == AGENT

    def value_bounds(self):
        return loser_payoff(AGENT), loser_payoff(OPPONENT)
