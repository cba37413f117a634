from mdp.MDP import MDP
from tictactoe.TicTacToeBoard import O, X, empty_board, empty_cells, is_over, place, winner

OPPONENTS = ('minimax', 'random')


class TicTacToeMDP(MDP):
    """
    Tic-Tac-Toe from the point of view of the agent playing X, who moves
    first. Winning pays +1, losing pays -1, a draw pays nothing.

    States are (board, to_move) with the board a 9-tuple in row-major order
    and actions the index of an empty cell.

    ``opponent='minimax'`` gives O its own states and lets the solver
    minimise over O's moves (an explicit adversarial layer).
    ``opponent='random'`` folds O into the transition: after each X move, O
    answers on every empty cell with equal probability, so only X-to-move
    states exist.
    """

    def __init__(self, opponent='minimax', board=None):
        if opponent not in OPPONENTS:
            raise ValueError(f"unknown opponent {opponent!r}, expected one of {OPPONENTS}")
        self.opponent = opponent
        self.board = empty_board() if board is None else tuple(board)
        if opponent == 'random' and self.initial_state()[1] != X:
            raise ValueError("with a folded random opponent the starting board must have X to move")

    def initial_state(self):
        to_move = X if self.board.count(X) == self.board.count(O) else O
        return (self.board, to_move)

    def actions(self, state):
        board, _to_move = state
        if is_over(board):
            return []
        return empty_cells(board)

    def transitions(self, state, action):
        board, to_move = state
        after = place(board, action, to_move)

        if self.opponent == 'minimax':
            return [(1.0, (after, -to_move), _reward(after))]
        if is_over(after):
            return [(1.0, (after, X), _reward(after))]

        replies = empty_cells(after)
        prob = 1.0 / len(replies)
        outcomes = []
        for cell in replies:
            answered = place(after, cell, O)
            outcomes.append((prob, (answered, X), _reward(answered)))
        return outcomes

    def is_terminal(self, state):
        board, _to_move = state
        return is_over(board)

    def is_max_state(self, state):
        _board, to_move = state
        return to_move == X

    def value_bounds(self):
        return (-1.0, 1.0)


def _reward(board):
    w = winner(board)
    if w == X:
        return 1.0
    if w == O:
        return -1.0
    return 0.0
