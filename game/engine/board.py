"""
Tic-tac-toe rules over a 9-cell board (index 0-8, row-major).

The board is never stored: it is always rebuilt from the ordered move list,
so these functions are pure and take/return plain lists.
"""
from typing import Iterable, List, Optional, Tuple
from .rules import BOARD_SIZE, LINES, X, O

Cell = Optional[str]
Board = List[Cell]


def empty_board() -> Board:
    return [None] * BOARD_SIZE


def board_from_moves(moves: Iterable[Tuple[int, int]], player_x_id, player_o_id) -> Board:
    """Fold ``(position, player_id)`` pairs in the given order.

    A move onto an occupied cell, or by someone who is not a player,
    is skipped rather than raising.
    """
    board = empty_board()
    for position, player_id in moves:
        if player_id == player_x_id:
            mark = X
        elif player_id == player_o_id:
            mark = O
        else:
            continue
        if is_valid_position(position) and board[position] is None:
            board[position] = mark
    return board


def winner(board: Board) -> Optional[str]:
    for a, b, c in LINES:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    return None


def is_draw(board: Board) -> bool:
    return all(cell is not None for cell in board) and winner(board) is None


def is_terminal(board: Board) -> bool:
    return winner(board) is not None or is_draw(board)


def current_turn(board: Board) -> str:
    xs = sum(1 for cell in board if cell == X)
    os_ = sum(1 for cell in board if cell == O)
    return X if xs <= os_ else O


def is_valid_position(position) -> bool:
    # bool is an int subclass but never a board index
    return isinstance(position, int) and not isinstance(position, bool) and 0 <= position < BOARD_SIZE
