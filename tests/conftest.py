"""Small models shared by the test modules."""

from __future__ import annotations

import random

from mdp.MDP import MDP


class RandomDagMDP(MDP):
    """Deterministic acyclic model: state s only links to larger states."""

    def __init__(self, n_states: int, seed: int, max_actions: int = 3) -> None:
        rng = random.Random(seed)
        self.table: dict[int, list[tuple[int, float]]] = {}
        for s in range(n_states - 1):
            n_actions = rng.randint(1, max_actions)
            self.table[s] = [
                (rng.randint(s + 1, n_states - 1), round(rng.uniform(-1.0, 1.0), 3))
                for _ in range(n_actions)
            ]

    def initial_state(self):
        return 0

    def actions(self, state):
        return list(range(len(self.table[state])))

    def transitions(self, state, action):
        nxt, reward = self.table[state][action]
        return [(1.0, nxt, reward)]

    def is_terminal(self, state):
        return state not in self.table


class RingMDP(MDP):
    """Cyclic model with no terminal states: n states on a ring."""

    def __init__(self, n_states: int = 50) -> None:
        self.n = n_states

    def initial_state(self):
        return 0

    def actions(self, state):
        return ["stay", "next", "jump"]

    def transitions(self, state, action):
        if action == "stay":
            return [(1.0, state, 0.0)]
        if action == "next":
            reward = 1.0 if state % 7 == 0 else -0.1
            return [(1.0, (state + 1) % self.n, reward)]
        return [(0.5, (state + 2) % self.n, 0.2), (0.5, state, 0.2)]

    def is_terminal(self, state):
        return False


def backward_induction(model: RandomDagMDP) -> dict[int, float]:
    """Optimal undiscounted values of an acyclic model, computed exactly."""
    values: dict[int, float] = {}
    for s in sorted(set(model.table) | {n for outs in model.table.values() for n, _ in outs}, reverse=True):
        if model.is_terminal(s):
            values[s] = 0.0
        else:
            values[s] = max(r + values[n] for n, r in model.table[s])
    return values


class TwinLoopsMDP(MDP):
    """
    From "root", action "short" enters a 3-state cycle and action "long" a
    7-state cycle; every step pays 1, so both are worth 1 / (1 - discount).
    """

    LOOPS = {"short": 3, "long": 7}

    def initial_state(self):
        return "root"

    def actions(self, state):
        if state == "root":
            return ["short", "long"]
        return ["next"]

    def transitions(self, state, action):
        if state == "root":
            return [(1.0, (action, 0), 1.0)]
        loop, k = state
        return [(1.0, (loop, (k + 1) % self.LOOPS[loop]), 1.0)]

    def is_terminal(self, state):
        return False
