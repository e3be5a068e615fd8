from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from ludo import socketio
from ludo.errors import LudoError, RoomNotFound
from ludo.protocol import (
    ERROR,
    GAME_STARTED,
    MESSAGE_TYPES,
    PIECE_CAPTURED,
    ROOM_CREATED,
    ROOM_JOINED,
    ROOM_UPDATED,
    ChooseColorMessage,
    CreateMessage,
    JoinMessage,
    LeaveMessage,
    MovePieceMessage,
    ReadyMessage,
    RollDiceMessage,
    StartGameMessage,
    parse_envelope,
    parse_message,
)
from ludo.services.rooms import RoomRegistry
from ludo.services.turns import move_piece, roll_dice


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _channel(code: str) -> str:
    return f"room:{code}"


class GameRouter:
    """Dispatches inbound socket messages to the registry and turn engine.

    The connection's Socket.IO sid is the participant id. Each message is
    processed with its room's lock held, broadcasts included.
    """

    def __init__(self, registry: RoomRegistry, namespace: str = '/ws'):
        self.registry = registry
        self.namespace = namespace
        self._handlers = {
            CreateMessage: self._on_create,
            JoinMessage: self._on_join,
            ChooseColorMessage: self._on_choose_color,
            ReadyMessage: self._on_ready,
            StartGameMessage: self._on_start_game,
            RollDiceMessage: self._on_roll_dice,
            MovePieceMessage: self._on_move_piece,
            LeaveMessage: self._on_leave,
        }

    # ---- Transport events ----

    def handle_connect(self, *args):
        current_app.logger.info(f"[connect] sid={_get_sid()}")

    def handle_disconnect(self, *args):
        sid = _get_sid()
        current_app.logger.info(f"[disconnect] sid={sid}")
        self._leave_current(sid)

    def handle_envelope(self, raw):
        self._run(lambda: parse_envelope(raw))

    def handler_for(self, tag: str):
        def _handler(data=None):
            self._run(lambda: parse_message(tag, data))
        _handler.__name__ = f"handle_{tag}"
        return _handler

    def _run(self, parse):
        sid = _get_sid()
        try:
            message = parse()
            current_app.logger.debug(f"[message] sid={sid} type={message.type}")
            self._handlers[type(message)](sid, message)
        except LudoError as exc:
            current_app.logger.info(f"[error] sid={sid} kind={exc.code} message={exc.message}")
            emit(ERROR, exc.to_dict())
        except Exception:
            current_app.logger.exception(f"[error] sid={sid} unhandled failure")
            emit(ERROR, {'message': 'Internal server error', 'code': 'InternalError'})

    # ---- Outbound ----

    def _broadcast(self, code: str, event: str, payload: dict, skip_sid=None) -> None:
        socketio.emit(event, payload, to=_channel(code), namespace=self.namespace, skip_sid=skip_sid)

    # ---- Message handlers ----

    def _on_create(self, sid, message: CreateMessage):
        self._leave_current(sid)
        payload = message.payload
        room = self.registry.create_room(sid, payload.playerName, payload.gameMode)
        with room.lock:
            join_room(_channel(room.code))
            emit(ROOM_CREATED, {'room': room.to_dict(), 'playerId': sid})
        current_app.logger.info(f"[create] room={room.code} player={sid} mode={room.game_mode.value}")

    def _on_join(self, sid, message: JoinMessage):
        code = message.payload.roomCode
        target = self.registry.get_room_by_code(code)
        if target is None:
            raise RoomNotFound()
        with target.lock:
            if self.registry.get_room(sid) is target:
                emit(ROOM_JOINED, {'room': target.to_dict(), 'playerId': sid})
                return
            # Rejected joins must not cost the player their current seat
            self.registry.check_joinable(target)
        self._leave_current(sid)

        with self.registry.locked_room(code=code) as room:
            if room is None:
                raise RoomNotFound()
            self.registry.join_room(code, sid, message.payload.playerName)
            join_room(_channel(room.code))
            snapshot = room.to_dict()
            emit(ROOM_JOINED, {'room': snapshot, 'playerId': sid})
            self._broadcast(room.code, ROOM_UPDATED, {'room': snapshot}, skip_sid=sid)
            current_app.logger.info(f"[join] room={room.code} player={sid} seats={len(room.players)}")

    def _on_choose_color(self, sid, message: ChooseColorMessage):
        with self.registry.locked_room(participant_id=sid) as room:
            if room is None:
                return
            self.registry.choose_color(sid, message.payload.color)
            self._broadcast(room.code, ROOM_UPDATED, {'room': room.to_dict()})

    def _on_ready(self, sid, message: ReadyMessage):
        with self.registry.locked_room(participant_id=sid) as room:
            if room is None:
                return
            self.registry.set_ready(sid)
            self._broadcast(room.code, ROOM_UPDATED, {'room': room.to_dict()})

    def _on_start_game(self, sid, message: StartGameMessage):
        with self.registry.locked_room(participant_id=sid) as room:
            if room is None:
                return
            self.registry.start_game(sid)
            self._broadcast(room.code, GAME_STARTED, {'room': room.to_dict()})
            current_app.logger.info(f"[start] room={room.code} pieces={len(room.game_state.pieces)}")

    def _on_roll_dice(self, sid, message: RollDiceMessage):
        with self.registry.locked_room(participant_id=sid) as room:
            if room is None:
                return
            result = roll_dice(room, sid, rng=self.registry.rng)
            self._broadcast(room.code, ROOM_UPDATED, {'room': room.to_dict()})
            current_app.logger.info(
                f"[roll] room={room.code} player={sid} value={result.value} move_owed={result.move_owed} turn_passed={result.turn_passed}"
            )

    def _on_move_piece(self, sid, message: MovePieceMessage):
        with self.registry.locked_room(participant_id=sid) as room:
            if room is None:
                return
            result = move_piece(room, sid, message.payload.pieceId)
            current_app.logger.info(
                f"[move] room={room.code} piece={result.piece.id} from={result.from_position} to={result.piece.position}"
            )
            snapshot = room.to_dict()
            self._broadcast(room.code, ROOM_UPDATED, {'room': snapshot})
            if result.captured is not None:
                self._broadcast(room.code, PIECE_CAPTURED, {
                    'capturedPiece': result.captured.to_dict(),
                    'room': snapshot,
                })
                current_app.logger.info(f"[capture] room={room.code} piece={result.captured.id} by={result.piece.id}")
            if result.winner is not None:
                current_app.logger.info(f"[winner] room={room.code} color={result.winner.value}")

    def _on_leave(self, sid, message: LeaveMessage):
        self._leave_current(sid)

    def _leave_current(self, sid):
        """Unseat ``sid`` from its room, if any, and tell who remains."""
        with self.registry.locked_room(participant_id=sid) as room:
            if room is None:
                return None
            code = self.registry.leave_room(sid)
            leave_room(_channel(code), sid=sid, namespace=self.namespace)
            remaining = self.registry.get_room_by_code(code)
            if remaining is not None:
                self._broadcast(code, ROOM_UPDATED, {'room': remaining.to_dict()})
                current_app.logger.info(f"[leave] room={code} player={sid} seats={len(remaining.players)}")
            else:
                current_app.logger.info(f"[leave] room={code} player={sid} room closed")
            return code


def register_socketio_handlers(registry: RoomRegistry, namespace: str = '/ws') -> GameRouter:
    """Register Socket.IO event handlers for one registry.

    Every inbound tag is its own event on ``namespace``; the ``message``
    event accepts the ``{type, payload}`` envelope instead.
    """
    router = GameRouter(registry, namespace=namespace)
    socketio.on_event('connect', router.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', router.handle_disconnect, namespace=namespace)
    socketio.on_event('message', router.handle_envelope, namespace=namespace)
    for tag in MESSAGE_TYPES:
        socketio.on_event(tag, router.handler_for(tag), namespace=namespace)
    return router
