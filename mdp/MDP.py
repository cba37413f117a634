class MDP:
    """
    Finite MDP interface supplied by a domain (a game, a scheduling problem...).

    States and actions can be any hashable types.
    Rewards are attached to transitions and are from the perspective of the
    maximising agent.
    """

    def initial_state(self):
        """Return the state that enumeration starts from."""
        raise NotImplementedError

    def actions(self, state):
        """
        Return an ordered sequence of the distinct legal actions at state.
        The order is used to break ties between equally good actions.
        """
        raise NotImplementedError

    def transitions(self, state, action):
        """
        Return a list of (probability, next_state, reward) tuples.
        Probabilities should sum to 1 for each (state, action) and repeated
        calls must return the same outcomes.
        """
        raise NotImplementedError

    def is_terminal(self, state):
        """Return True if state is terminal (absorbing, no actions)."""
        raise NotImplementedError

    def is_max_state(self, state):
        """
        Return True if the agent chooses actions to maximize value at this state.
        For adversarial turn-based games modelled with an explicit opponent
        layer, return False for the opponent's turn.
        """
        return True

    def value_bounds(self):
        """
        Optional: return (min_value, max_value) bounds for V(s).
        Only used by the LP cross-check; None derives bounds from the rewards.
        """
        return None
