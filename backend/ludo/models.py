from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import random
import string
import threading
import time


ROOM_CODE_LENGTH = 6
PIECES_PER_COLOR = 4

# Relative positions
BASE_POSITION = -1
TRACK_END = 50          # last relative cell on the shared track
HOME_STRETCH_START = 51
HOME_POSITION = 57      # transient, normalized to FINISHED_POSITION
FINISHED_POSITION = 99
TRACK_LENGTH = 52


class Color(str, Enum):
    RED = 'red'
    GREEN = 'green'
    YELLOW = 'yellow'
    BLUE = 'blue'


class GameMode(str, Enum):
    TWO_PLAYER = '2-player'
    FOUR_PLAYER = '4-player'

    @property
    def capacity(self) -> int:
        return 2 if self is GameMode.TWO_PLAYER else 4

    @property
    def colors(self) -> List[Color]:
        if self is GameMode.TWO_PLAYER:
            # Opposite corners of the board
            return [Color.RED, Color.YELLOW]
        return [Color.RED, Color.GREEN, Color.YELLOW, Color.BLUE]


# Each color's starting cell on the shared track
COLOR_OFFSETS = {
    Color.RED: 0,
    Color.GREEN: 13,
    Color.YELLOW: 26,
    Color.BLUE: 39,
}

# Start cells plus the four star cells
SAFE_CELLS = frozenset({0, 8, 13, 21, 26, 34, 39, 47})


@dataclass
class GamePiece:
    id: str
    color: Color
    position: int = BASE_POSITION
    is_safe: bool = True

    def to_dict(self):
        return {
            'id': self.id,
            'color': self.color.value,
            'position': self.position,
            'isSafe': self.is_safe,
        }


@dataclass
class Player:
    id: str
    name: str
    color: Optional[Color] = None
    ready: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'color': self.color.value if self.color else None,
            'ready': self.ready,
        }


@dataclass
class GameState:
    pieces: List[GamePiece] = field(default_factory=list)
    current_turn_index: int = 0
    dice_value: Optional[int] = None
    # Final roll of the previous player's turn, only used to bias the dice
    last_dice_value: Optional[int] = None
    is_first_roll_of_turn: bool = True
    waiting_for_move: bool = False
    winner: Optional[Color] = None
    started: bool = False

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    def pieces_of(self, color: Color) -> List[GamePiece]:
        return [p for p in self.pieces if p.color == color]

    def find_piece(self, piece_id: str) -> Optional[GamePiece]:
        return next((p for p in self.pieces if p.id == piece_id), None)

    def to_dict(self):
        return {
            'pieces': [p.to_dict() for p in self.pieces],
            'currentTurnIndex': self.current_turn_index,
            'diceValue': self.dice_value,
            'lastDiceValue': self.last_dice_value,
            'isFirstRollOfTurn': self.is_first_roll_of_turn,
            'waitingForMove': self.waiting_for_move,
            'winner': self.winner.value if self.winner else None,
            'started': self.started,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Room:
    code: str
    game_mode: GameMode
    players: List[Player] = field(default_factory=list)
    game_state: GameState = field(default_factory=GameState)
    created_at: int = field(default_factory=_now_ms)
    # Held by the router for the whole of one inbound message
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def host(self) -> Optional[Player]:
        return self.players[0] if self.players else None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.game_mode.capacity

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.game_state.current_turn_index]

    def find_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    def to_dict(self):
        return {
            'code': self.code,
            'players': [p.to_dict() for p in self.players],
            'gameMode': self.game_mode.value,
            'gameState': self.game_state.to_dict(),
            'createdAt': self.created_at,
        }


def generate_room_code(is_taken, rng=random, length=ROOM_CODE_LENGTH):
    """Generate a room code for which ``is_taken(code)`` is false."""
    while True:
        code = ''.join(rng.choices(string.ascii_uppercase + string.digits, k=length))
        if not is_taken(code):
            return code
