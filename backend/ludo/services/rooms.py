import random
import threading
from contextlib import contextmanager
from typing import Dict, List, Optional

from ludo.errors import (
    ColorTaken,
    ColorUnavailable,
    GameAlreadyStarted,
    NotAllReady,
    RoomFull,
    RoomNotFound,
)
from ludo.models import (
    PIECES_PER_COLOR,
    Color,
    GameMode,
    GamePiece,
    GameState,
    Player,
    Room,
    generate_room_code,
)


MIN_PLAYERS = 2


class RoomRegistry:
    """Owns every live room and the participant -> room mapping.

    State is volatile: rooms exist only while at least one player is seated.
    The registry lock guards the two maps only; a room's own ``lock`` guards
    the room and is taken by the caller through ``locked_room``. The room
    lock is never acquired while the registry lock is held.
    """

    def __init__(self, rng=None):
        self.rng = rng or random.Random()
        self._rooms: Dict[str, Room] = {}
        self._player_to_room: Dict[str, str] = {}
        self._lock = threading.RLock()

    # ---- Lookups ----

    def get_room(self, participant_id: str) -> Optional[Room]:
        with self._lock:
            code = self._player_to_room.get(participant_id)
            return self._rooms.get(code) if code else None

    def get_room_by_code(self, code: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(code)

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def available_colors(self, room: Room) -> List[Color]:
        return room.game_mode.colors

    @contextmanager
    def locked_room(self, participant_id: Optional[str] = None, code: Optional[str] = None):
        """Yield the participant's (or code's) room with its lock held.

        Yields None when there is no such room. The lookup is repeated after
        the lock is taken in case the room changed hands while waiting.
        """
        while True:
            room = self.get_room(participant_id) if participant_id is not None else self.get_room_by_code(code)
            if room is None:
                yield None
                return
            with room.lock:
                current = self.get_room(participant_id) if participant_id is not None else self.get_room_by_code(code)
                if current is room:
                    yield room
                    return

    # ---- Lifecycle ----

    def create_room(self, participant_id: str, name: str, mode: GameMode = GameMode.FOUR_PLAYER) -> Room:
        with self._lock:
            code = generate_room_code(lambda c: c in self._rooms, rng=self.rng)
            room = Room(code=code, game_mode=mode, players=[Player(id=participant_id, name=name)])
            self._rooms[code] = room
            self._player_to_room[participant_id] = code
            return room

    def check_joinable(self, room: Room) -> None:
        if room.is_full:
            raise RoomFull()
        if room.game_state.started:
            raise GameAlreadyStarted()

    def join_room(self, code: str, participant_id: str, name: str) -> Room:
        """Seat a new player. The caller must hold the room's lock."""
        room = self.get_room_by_code(code.upper())
        if room is None:
            raise RoomNotFound()
        self.check_joinable(room)
        room.players.append(Player(id=participant_id, name=name))
        with self._lock:
            self._player_to_room[participant_id] = room.code
        return room

    def choose_color(self, participant_id: str, color: Color) -> Optional[Room]:
        room = self.get_room(participant_id)
        if room is None:
            return None
        if room.game_state.started:
            raise GameAlreadyStarted()
        if color not in self.available_colors(room):
            raise ColorUnavailable()
        if any(p.color == color and p.id != participant_id for p in room.players):
            raise ColorTaken()
        player = room.find_player(participant_id)
        if player:
            player.color = color
        return room

    def set_ready(self, participant_id: str) -> Optional[Room]:
        room = self.get_room(participant_id)
        if room is None:
            return None
        if room.game_state.started:
            raise GameAlreadyStarted()
        player = room.find_player(participant_id)
        # Ready requires a color; otherwise silently ignored
        if player and player.color:
            player.ready = True
        return room

    def can_start(self, room: Room) -> bool:
        return (
            MIN_PLAYERS <= len(room.players) <= room.game_mode.capacity
            and all(p.color is not None and p.ready for p in room.players)
        )

    def start_game(self, participant_id: str) -> Optional[Room]:
        room = self.get_room(participant_id)
        if room is None:
            return None
        if room.game_state.started:
            raise GameAlreadyStarted()
        if not self.can_start(room):
            raise NotAllReady()

        pieces = []
        for player in room.players:
            if player.color:
                for i in range(PIECES_PER_COLOR):
                    pieces.append(GamePiece(id=f"{player.color.value}-{i}", color=player.color))
        room.game_state = GameState(pieces=pieces, started=True)
        return room

    def leave_room(self, participant_id: str) -> Optional[str]:
        """Unseat the participant. Returns the affected room code, if any.

        The room is destroyed when its last player leaves.
        """
        with self._lock:
            code = self._player_to_room.pop(participant_id, None)
            room = self._rooms.get(code) if code else None
            if room is None:
                return None
            idx = next((i for i, p in enumerate(room.players) if p.id == participant_id), None)
            if idx is not None:
                room.players.pop(idx)
            if not room.players:
                del self._rooms[code]
                return code

        if idx is not None:
            _reseat_turn(room, idx)
        return code


def _reseat_turn(room: Room, removed_index: int) -> None:
    """Keep current_turn_index pointing at a live player after a removal."""
    state = room.game_state
    if removed_index < state.current_turn_index:
        state.current_turn_index -= 1
    elif removed_index == state.current_turn_index:
        state.current_turn_index %= len(room.players)
        if state.started:
            # The seat passed on mid-turn; the next player starts fresh
            state.dice_value = None
            state.waiting_for_move = False
            state.is_first_roll_of_turn = True
