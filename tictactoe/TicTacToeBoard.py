EMPTY = 0
X = 1
O = -1

LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)

CENTER = 4


def empty_board():
    return (EMPTY,) * 9


def place(board, cell, mark):
    """Return a new board with mark at cell (0..8, row-major)."""
    if board[cell] != EMPTY:
        raise ValueError(f"cell {cell} is already taken")
    return board[:cell] + (mark,) + board[cell + 1:]


def empty_cells(board):
    return [cell for cell, mark in enumerate(board) if mark == EMPTY]


def winner(board):
    """X, O, or None."""
    for a, b, c in LINES:
        if board[a] != EMPTY and board[a] == board[b] == board[c]:
            return board[a]
    return None


def is_full(board):
    return EMPTY not in board


def is_over(board):
    return winner(board) is not None or is_full(board)


def cell_name(cell):
    """Cell index as [row,col]."""
    return f"[{cell // 3},{cell % 3}]"
