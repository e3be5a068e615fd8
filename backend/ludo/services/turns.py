"""Per-room turn flow: roll, then maybe move, then advance.

A room is in one of four states, derived from its GameState:

- awaiting roll: ``waiting_for_move`` is False and no winner
- awaiting move: ``waiting_for_move`` is True (``dice_value`` is set)
- advancing: transient, inside ``roll_dice`` / ``move_piece``
- game over: ``winner`` is set; every further roll or move is rejected

One bonus per resolved turn: a 6, a capture, or both keep the turn with
the same player exactly once.
"""
import random
from dataclasses import dataclass
from typing import Optional

from ludo.errors import (
    AlreadyRolled,
    GameNotStarted,
    GameOver,
    InvalidMove,
    InvalidPiece,
    MustRollFirst,
    NotYourTurn,
)
from ludo.models import Room
from ludo.services.dice import roll_weighted_die
from ludo.services.movement import MoveResult, all_in_base, apply_move, can_move, has_legal_move


BONUS_ROLL = 6


@dataclass
class RollResult:
    value: int
    # False when no piece could use the roll and it was discarded
    move_owed: bool
    turn_passed: bool


def _check_actor(room: Room, participant_id: str) -> None:
    state = room.game_state
    if not state.started:
        raise GameNotStarted()
    if state.is_over:
        raise GameOver()
    current = room.current_player
    if current is None or current.id != participant_id:
        raise NotYourTurn()


def _pass_turn(room: Room, final_roll: int) -> None:
    state = room.game_state
    # Seeds the next player's repeat-avoidance bias
    state.last_dice_value = final_roll
    state.is_first_roll_of_turn = True
    state.current_turn_index = (state.current_turn_index + 1) % len(room.players)


def roll_dice(room: Room, participant_id: str, rng=random) -> RollResult:
    _check_actor(room, participant_id)
    state = room.game_state
    if state.waiting_for_move:
        raise AlreadyRolled()

    color = room.current_player.color
    value = roll_weighted_die(
        all_in_base(state, color),
        state.last_dice_value,
        state.is_first_roll_of_turn,
        rng=rng,
    )
    state.dice_value = value
    state.is_first_roll_of_turn = False

    if has_legal_move(state, color, value):
        state.waiting_for_move = True
        return RollResult(value=value, move_owed=True, turn_passed=False)

    # Unusable roll: discard it; a 6 still earns a re-roll
    state.dice_value = None
    passed = value != BONUS_ROLL
    if passed:
        _pass_turn(room, value)
    return RollResult(value=value, move_owed=False, turn_passed=passed)


def move_piece(room: Room, participant_id: str, piece_id: str) -> MoveResult:
    _check_actor(room, participant_id)
    state = room.game_state
    roll: Optional[int] = state.dice_value
    if not state.waiting_for_move or roll is None:
        raise MustRollFirst()

    color = room.current_player.color
    piece = state.find_piece(piece_id)
    if piece is None or piece.color != color:
        raise InvalidPiece()
    if not can_move(piece, roll, color):
        raise InvalidMove()

    result = apply_move(state, piece, roll)
    state.waiting_for_move = False
    state.dice_value = None

    keeps_turn = roll == BONUS_ROLL or result.captured is not None
    if not keeps_turn and not state.is_over:
        _pass_turn(room, roll)
    return result
