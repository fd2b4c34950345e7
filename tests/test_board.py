import pytest

from pont.anim import hand_position
from pont.board import BoardModel, DropKind, DropTarget
from pont.game import Color, Shape
from pont.protocol import Play, Swap

RED_CIRCLE = (Shape.CIRCLE, Color.RED)
RED_SQUARE = (Shape.SQUARE, Color.RED)
BLUE_STAR = (Shape.STAR, Color.BLUE)


def make_board(**kwargs):
    kwargs.setdefault("hand", [RED_CIRCLE, RED_SQUARE, BLUE_STAR])
    return BoardModel(**kwargs)


def test_off_turn_drag_is_clamped_to_rack():
    board = make_board(my_turn=False)
    pos, target = board.drop_target((10.0, 10.0), (0.0, 0.0), 2, None)
    assert pos == (10.0, 175.0)
    assert target == DropTarget(DropKind.RETURN_TO_HAND, hand_index=0)


def test_drop_on_empty_cell():
    board = make_board(my_turn=True)
    pos, target = board.drop_target((52.0, 48.0), (2.0, -2.0), 0, None)
    assert pos == (50.0, 50.0)
    assert target == DropTarget(DropKind.DROP_TO_GRID, cell=(5, 5))


def test_drop_accounts_for_pan():
    board = make_board(my_turn=True, pan_offset=(5.0, 0.0))
    _, target = board.drop_target((55.0, 50.0), (0.0, 0.0), 0, None)
    assert target.cell == (5, 5)


def test_overlap_returns_to_hand_or_grid():
    board = make_board(my_turn=True, grid={(5, 5): BLUE_STAR})
    _, to_hand = board.drop_target((50.0, 50.0), (0.0, 0.0), 1, None)
    assert to_hand == DropTarget(DropKind.RETURN_TO_HAND, hand_index=1)
    _, to_grid = board.drop_target((50.0, 50.0), (0.0, 0.0), 1, (2, 3))
    assert to_grid == DropTarget(DropKind.RETURN_TO_GRID, cell=(2, 3))


def test_offboard_right_edge_falls_back():
    board = make_board(my_turn=True)
    _, target = board.drop_target((188.0, 50.0), (0.0, 0.0), 2, None)
    assert target.kind is DropKind.RETURN_TO_HAND
    assert target.hand_index == 2


def test_exchange_box_target():
    board = make_board(my_turn=True, pieces_remaining=10)
    _, target = board.drop_target((100.0, 180.0), (0.0, 0.0), 0, None)
    assert target.kind is DropKind.EXCHANGE


def test_exchange_box_blocked_by_staged_tiles():
    board = make_board(my_turn=True, pieces_remaining=10, tentative={(0, 0): 0})
    _, target = board.drop_target((100.0, 180.0), (0.0, 0.0), 1, None)
    assert target.kind is DropKind.RETURN_TO_HAND
    assert target.hand_index == int((100.0 + 2.5) / 15.0)


def test_staged_swap_keeps_tile_off_grid():
    board = make_board(my_turn=True, pieces_remaining=10, exchange_list=[0])
    pos, target = board.drop_target((50.0, 50.0), (0.0, 0.0), 1, None)
    assert pos[1] == 175.0
    assert target.kind is DropKind.RETURN_TO_HAND


def test_score_and_estimate_text():
    board = make_board(tentative={(0, 0): 0, (1, 0): 1})
    assert board.get_score() == 2
    assert board.estimated_score_text(True) == " [+2]"
    assert board.estimated_score_text(False) == ""


def test_score_none_when_cell_taken():
    board = make_board(grid={(0, 0): BLUE_STAR}, tentative={(0, 0): 0})
    assert board.get_score() is None
    assert board.estimated_score_text(True) == ""


def test_mark_invalid_valid_line():
    board = make_board(tentative={(0, 0): 0, (1, 0): 1})
    assert board.mark_invalid() == set()
    assert board.invalid_hand_indexes() == set()


def test_mark_invalid_duplicate_pieces():
    board = make_board(grid={(1, 0): RED_CIRCLE}, tentative={(0, 0): 0})
    assert board.mark_invalid() == {(0, 0), (1, 0)}
    assert board.invalid_hand_indexes() == {0}


def test_mark_invalid_nonlinear_play():
    board = make_board(
        grid={(1, 0): (Shape.CROSS, Color.RED)},
        tentative={(0, 0): 0, (1, 1): 1},
    )
    invalid = board.mark_invalid()
    assert {(0, 0), (1, 1)} <= invalid


def test_exchange_text_no_pieces():
    board = make_board(my_turn=True, pieces_remaining=0)
    assert board.exchange_text(True) == ("<p>No pieces<br>left in bag</p>", True)


def test_exchange_text_not_my_turn():
    board = make_board(pieces_remaining=5)
    assert board.exchange_text(False) == ("<p>Drag here<br>to swap</p>", True)


def test_exchange_text_enabled_states():
    board = make_board(pieces_remaining=5)
    assert board.exchange_text(True) == ("<p>Drag here<br>to swap</p>", False)
    board.exchange_list = [0]
    assert board.exchange_text(True) == ("<p>Swap 1 piece </p>", False)
    board.pieces_remaining = 2
    board.exchange_list = [0, 1]
    assert board.exchange_text(True) == ("<p>Swap 2 pieces (max)</p>", False)


def test_exchange_text_cancels_uncoverable_swap():
    board = make_board(pieces_remaining=1, exchange_list=[0, 1])
    text, disabled = board.exchange_text(False)
    assert board.exchange_list == []
    assert text == "<p>Drag here<br>to swap</p>"
    assert disabled is False


def test_count_text():
    board = make_board(pieces_remaining=1)
    assert board.count_text() == "<p>1 piece left in the bag</p>"
    board.pieces_remaining = 3
    assert board.count_text() == "<p>3 pieces left in the bag</p>"


def test_make_move_play():
    board = make_board(my_turn=True, tentative={(0, 0): 0, (1, 0): 1})
    move = board.make_move()
    assert isinstance(move, Play)
    assert sorted(move.pieces, key=lambda p: p[1]) == [(RED_CIRCLE, 0, 0), (RED_SQUARE, 1, 0)]
    assert board.my_turn is False


def test_make_move_swap():
    board = make_board(my_turn=True, exchange_list=[2, 0])
    assert board.make_move() == Swap([BLUE_STAR, RED_CIRCLE])


def test_make_move_requires_staged_tiles():
    board = make_board(my_turn=True)
    with pytest.raises(ValueError):
        board.make_move()


def test_move_accepted_after_play():
    board = make_board(tentative={(0, 0): 1})
    moves = board.on_move_accepted([RED_SQUARE])
    assert board.grid == {(0, 0): RED_SQUARE}
    assert board.hand == [RED_CIRCLE, BLUE_STAR, RED_SQUARE]
    assert board.tentative == {}
    x = hand_position(2)[0]
    assert moves == [
        (1, hand_position(2), hand_position(1)),
        (2, (x, 220.0), (x, 185.0)),
    ]


def test_move_accepted_after_swap():
    board = make_board(exchange_list=[0])
    moves = board.on_move_accepted([RED_SQUARE])
    assert board.grid == {}
    assert board.hand == [RED_SQUARE, BLUE_STAR, RED_SQUARE]
    assert board.exchange_list == []
    assert len(moves) == 3


def test_reject_all_from_grid():
    board = make_board(tentative={(2, 3): 1}, pan_offset=(5.0, 5.0))
    moves = board.reject_all()
    assert board.tentative == {}
    assert moves == [(1, (25.0, 35.0), hand_position(1))]


def test_reject_all_from_exchange():
    board = make_board(exchange_list=[2])
    moves = board.reject_all()
    assert board.exchange_list == []
    x, y = hand_position(2)
    assert moves == [(2, (x, 200.0), (x, y))]
    assert board.reject_all() == []