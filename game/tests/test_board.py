import pytest

from game.engine.board import (
    board_from_moves, current_turn, empty_board, is_draw, is_terminal, is_valid_position, winner,
)
from game.engine.rules import LINES

PX, PO = 1, 2


def play(*positions):
    """Alternate X, O, X, ... over the given positions."""
    return [(pos, PX if i % 2 == 0 else PO) for i, pos in enumerate(positions)]


def test_empty_board_is_x_to_move():
    board = empty_board()
    assert board == [None] * 9
    assert current_turn(board) == "X"
    assert winner(board) is None
    assert not is_draw(board)


@pytest.mark.parametrize("positions", [(), (4,), (4, 0), (0, 1, 2), (8, 7, 6, 5), (0, 2, 1, 3, 5, 4, 6, 7)])
def test_turn_follows_move_count(positions):
    board = board_from_moves(play(*positions), PX, PO)
    assert current_turn(board) == ("X" if len(positions) % 2 == 0 else "O")


def test_occupied_cell_is_never_overwritten():
    moves = play(4, 0)
    before = board_from_moves(moves, PX, PO)
    after = board_from_moves(moves + [(4, PO), (0, PX)], PX, PO)
    assert after == before


def test_moves_by_strangers_are_ignored():
    board = board_from_moves([(0, 99)] + play(4), PX, PO)
    assert board[0] is None
    assert board[4] == "X"


def test_incremental_fold_matches_full_replay():
    moves = play(4, 0, 8, 2, 1, 7)
    board = empty_board()
    for i, (pos, _) in enumerate(moves):
        nxt = board_from_moves(moves[: i + 1], PX, PO)
        assert [c for c in range(9) if nxt[c] != board[c]] == [pos]
        board = nxt
    assert board == board_from_moves(moves, PX, PO)


def test_vertical_win_for_x():
    board = board_from_moves(play(0, 1, 3, 4, 6), PX, PO)
    assert winner(board) == "X"
    assert not is_draw(board)
    assert is_terminal(board)


@pytest.mark.parametrize("line", LINES)
def test_every_line_wins(line):
    board = empty_board()
    for i in line:
        board[i] = "O"
    assert winner(board) == "O"


def test_full_board_without_line_is_draw():
    # X: 0,1,5,6,8  O: 2,3,4,7
    board = board_from_moves(play(0, 2, 1, 3, 5, 4, 6, 7, 8), PX, PO)
    assert None not in board
    assert winner(board) is None
    assert is_draw(board)


def test_full_board_with_line_is_not_draw():
    board = ["X", "X", "X", "O", "O", "X", "O", "X", "O"]
    assert winner(board) == "X"
    assert not is_draw(board)


@pytest.mark.parametrize("value,ok", [(0, True), (8, True), (-1, False), (9, False), (3.0, False), ("3", False), (True, False), (None, False)])
def test_valid_positions(value, ok):
    assert is_valid_position(value) is ok
