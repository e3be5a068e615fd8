from ludo.models import Color, GamePiece, GameState
from ludo.services.movement import (
    NOT_ON_TRACK,
    absolute_cell,
    apply_move,
    can_move,
    is_safe,
)


def _state(*pieces):
    return GameState(pieces=list(pieces), started=True)


def test_absolute_cell_uses_color_offset():
    assert absolute_cell(GamePiece('red-0', Color.RED, 5)) == 5
    assert absolute_cell(GamePiece('green-0', Color.GREEN, 5)) == 18
    assert absolute_cell(GamePiece('blue-0', Color.BLUE, 20)) == 7
    assert absolute_cell(GamePiece('yellow-0', Color.YELLOW, -1)) == NOT_ON_TRACK
    assert absolute_cell(GamePiece('yellow-0', Color.YELLOW, 52)) == NOT_ON_TRACK


def test_safe_cells():
    assert is_safe(GamePiece('red-0', Color.RED, -1))
    assert is_safe(GamePiece('red-0', Color.RED, 51))
    assert is_safe(GamePiece('red-0', Color.RED, 99))
    assert is_safe(GamePiece('red-0', Color.RED, 8))
    # green start cell, reached by red at relative 13
    assert is_safe(GamePiece('red-0', Color.RED, 13))
    assert not is_safe(GamePiece('red-0', Color.RED, 9))
    # blue at relative 8 sits on absolute 47, a star
    assert is_safe(GamePiece('blue-0', Color.BLUE, 8))


def test_base_piece_leaves_only_on_six():
    piece = GamePiece('red-0', Color.RED)
    for roll in range(1, 6):
        assert not can_move(piece, roll, Color.RED)
    assert can_move(piece, 6, Color.RED)


def test_move_past_home_is_rejected():
    piece = GamePiece('red-0', Color.RED, 53)
    assert can_move(piece, 4, Color.RED)
    assert not can_move(piece, 5, Color.RED)
    assert not can_move(GamePiece('red-1', Color.RED, 99), 1, Color.RED)


def test_can_move_requires_roll_and_active_color():
    piece = GamePiece('red-0', Color.RED, 3)
    assert not can_move(piece, None, Color.RED)
    assert not can_move(piece, 2, Color.YELLOW)


def test_leaving_base_lands_on_start_cell():
    piece = GamePiece('red-0', Color.RED)
    state = _state(piece)
    apply_move(state, piece, 6)
    assert piece.position == 0
    assert piece.is_safe


def test_home_stretch_skips_capture_check():
    mover = GamePiece('red-0', Color.RED, 48)
    state = _state(mover, GamePiece('yellow-0', Color.YELLOW, 26))
    result = apply_move(state, mover, 4)
    assert mover.position == 52
    assert mover.is_safe
    assert result.captured is None


def test_star_cell_prevents_capture():
    mover = GamePiece('red-0', Color.RED, 7)
    # yellow relative 34 is absolute 8
    opponent = GamePiece('yellow-0', Color.YELLOW, 34)
    state = _state(mover, opponent)
    result = apply_move(state, mover, 1)
    assert mover.position == 8
    assert mover.is_safe
    assert result.captured is None
    assert opponent.position == 34


def test_capture_sends_opponent_home():
    mover = GamePiece('red-0', Color.RED, 6)
    # green relative 49 is absolute 10
    victim = GamePiece('green-2', Color.GREEN, 49)
    state = _state(mover, victim)
    result = apply_move(state, mover, 4)
    assert mover.position == 10
    assert not mover.is_safe
    assert result.captured.id == 'green-2'
    assert result.captured.position == 49
    assert victim.position == -1
    assert victim.is_safe


def test_only_one_capture_per_move():
    mover = GamePiece('red-0', Color.RED, 6)
    first = GamePiece('green-0', Color.GREEN, 49)
    second = GamePiece('yellow-0', Color.YELLOW, 36)
    state = _state(mover, first, second)
    result = apply_move(state, mover, 4)
    assert result.captured.id == 'green-0'
    assert second.position == 36


def test_same_color_is_never_captured():
    mover = GamePiece('red-0', Color.RED, 6)
    friend = GamePiece('red-1', Color.RED, 10)
    state = _state(mover, friend)
    assert apply_move(state, mover, 4).captured is None
    assert friend.position == 10


def test_exact_home_finishes_and_wins():
    pieces = [GamePiece(f'red-{i}', Color.RED, 99) for i in range(3)]
    last = GamePiece('red-3', Color.RED, 54)
    state = _state(*pieces, last)
    result = apply_move(state, last, 3)
    assert last.position == 99
    assert result.finished
    assert result.winner == Color.RED
    assert state.winner == Color.RED


def test_finishing_one_piece_is_not_a_win():
    piece = GamePiece('red-0', Color.RED, 55)
    state = _state(piece, GamePiece('red-1', Color.RED, 20))
    result = apply_move(state, piece, 2)
    assert piece.position == 99
    assert result.finished
    assert state.winner is None
