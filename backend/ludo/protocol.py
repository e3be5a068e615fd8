"""Inbound message records and outbound event names.

Inbound traffic is a closed set of tagged messages; each tag has a fixed
payload record. Anything that fails validation is an InvalidMessageFormat.
"""
from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ludo.errors import InvalidMessageFormat
from ludo.models import Color, GameMode


PlayerName = Annotated[str, Field(min_length=1, max_length=20)]

# Outbound event names
ROOM_CREATED = 'room_created'
ROOM_JOINED = 'room_joined'
ROOM_UPDATED = 'room_updated'
GAME_STARTED = 'game_started'
PIECE_CAPTURED = 'piece_captured'
ERROR = 'error'


class _Payload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')


class EmptyPayload(_Payload):
    pass


class CreatePayload(_Payload):
    playerName: PlayerName
    gameMode: GameMode = GameMode.FOUR_PLAYER


class JoinPayload(_Payload):
    # Unknown or malformed codes are answered by the lookup with RoomNotFound
    roomCode: str = Field(min_length=1)
    playerName: PlayerName

    @field_validator('roomCode')
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()


class ChooseColorPayload(_Payload):
    color: Color


class MovePiecePayload(_Payload):
    pieceId: str = Field(min_length=1)


class CreateMessage(BaseModel):
    type: Literal['create']
    payload: CreatePayload


class JoinMessage(BaseModel):
    type: Literal['join']
    payload: JoinPayload


class ChooseColorMessage(BaseModel):
    type: Literal['choose_color']
    payload: ChooseColorPayload


class ReadyMessage(BaseModel):
    type: Literal['ready']
    payload: EmptyPayload = Field(default_factory=EmptyPayload)


class StartGameMessage(BaseModel):
    type: Literal['start_game']
    payload: EmptyPayload = Field(default_factory=EmptyPayload)


class RollDiceMessage(BaseModel):
    type: Literal['roll_dice']
    payload: EmptyPayload = Field(default_factory=EmptyPayload)


class MovePieceMessage(BaseModel):
    type: Literal['move_piece']
    payload: MovePiecePayload


class LeaveMessage(BaseModel):
    type: Literal['leave']
    payload: EmptyPayload = Field(default_factory=EmptyPayload)


InboundMessage = Annotated[
    Union[
        CreateMessage,
        JoinMessage,
        ChooseColorMessage,
        ReadyMessage,
        StartGameMessage,
        RollDiceMessage,
        MovePieceMessage,
        LeaveMessage,
    ],
    Field(discriminator='type'),
]

_inbound = TypeAdapter(InboundMessage)

MESSAGE_TYPES = (
    'create', 'join', 'choose_color', 'ready',
    'start_game', 'roll_dice', 'move_piece', 'leave',
)


def parse_message(tag: str, payload: Optional[Any] = None):
    """Validate one tagged message; raises InvalidMessageFormat."""
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidMessageFormat()
    try:
        return _inbound.validate_python({'type': tag, 'payload': payload})
    except ValidationError as exc:
        raise InvalidMessageFormat() from exc


def parse_envelope(raw: Any):
    """Validate a ``{type, payload}`` envelope, given as a dict or JSON text."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise InvalidMessageFormat() from exc
    if not isinstance(raw, dict) or not isinstance(raw.get('type'), str):
        raise InvalidMessageFormat()
    return parse_message(raw['type'], raw.get('payload'))
