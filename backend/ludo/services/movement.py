from dataclasses import dataclass, replace
from typing import Optional

from ludo.models import (
    BASE_POSITION,
    COLOR_OFFSETS,
    FINISHED_POSITION,
    HOME_POSITION,
    HOME_STRETCH_START,
    SAFE_CELLS,
    TRACK_END,
    TRACK_LENGTH,
    Color,
    GamePiece,
    GameState,
)


NOT_ON_TRACK = -1


@dataclass
class MoveResult:
    piece: GamePiece
    from_position: int
    # Snapshot of the captured piece as it stood before being sent home
    captured: Optional[GamePiece] = None
    finished: bool = False
    winner: Optional[Color] = None


def is_on_track(piece: GamePiece) -> bool:
    return 0 <= piece.position <= TRACK_END


def absolute_cell(piece: GamePiece) -> int:
    """Cell on the shared 52-cell loop, or NOT_ON_TRACK."""
    if not is_on_track(piece):
        return NOT_ON_TRACK
    return (piece.position + COLOR_OFFSETS[piece.color]) % TRACK_LENGTH


def is_safe(piece: GamePiece) -> bool:
    if piece.position == BASE_POSITION or piece.position >= HOME_STRETCH_START:
        return True
    return absolute_cell(piece) in SAFE_CELLS


def can_move(piece: GamePiece, roll: Optional[int], active_color: Optional[Color] = None) -> bool:
    if roll is None:
        return False
    if active_color is not None and piece.color != active_color:
        return False
    if piece.position == BASE_POSITION:
        return roll == 6
    return piece.position + roll <= HOME_POSITION


def has_legal_move(state: GameState, color: Color, roll: int) -> bool:
    return any(can_move(p, roll, color) for p in state.pieces_of(color))


def all_in_base(state: GameState, color: Color) -> bool:
    return all(p.position == BASE_POSITION for p in state.pieces_of(color))


def _capture_at(state: GameState, mover: GamePiece) -> Optional[GamePiece]:
    cell = absolute_cell(mover)
    if cell == NOT_ON_TRACK or cell in SAFE_CELLS:
        return None
    for other in state.pieces:
        if other.color == mover.color or not is_on_track(other):
            continue
        if absolute_cell(other) == cell:
            snapshot = replace(other)
            other.position = BASE_POSITION
            other.is_safe = True
            # One capture per move
            return snapshot
    return None


def apply_move(state: GameState, piece: GamePiece, roll: int) -> MoveResult:
    """Advance ``piece`` by ``roll`` and resolve capture, finish and win.

    The caller is responsible for legality; see ``can_move``.
    """
    result = MoveResult(piece=piece, from_position=piece.position)
    if piece.position == BASE_POSITION:
        piece.position = 0
    else:
        piece.position += roll
    piece.is_safe = is_safe(piece)

    result.captured = _capture_at(state, piece)

    if piece.position == HOME_POSITION:
        piece.position = FINISHED_POSITION
        piece.is_safe = True
        result.finished = True

    if all(p.position == FINISHED_POSITION for p in state.pieces_of(piece.color)):
        state.winner = piece.color
        result.winner = piece.color
    return result
