"""Failure kinds raised by the room registry and the turn state machine.

Every kind is scoped to the participant that caused it: the socket router
answers with an ``error`` event to that connection only and never
rebroadcasts room state on failure.
"""


class LudoError(Exception):
    """Base class for all rejected player actions."""

    code = 'LudoError'
    default_message = 'Request rejected'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'message': self.message, 'code': self.code}


class RoomNotFound(LudoError):
    code = 'RoomNotFound'
    default_message = 'Room not found'


class RoomFull(LudoError):
    code = 'RoomFull'
    default_message = 'Room is full'


class GameAlreadyStarted(LudoError):
    code = 'GameAlreadyStarted'
    default_message = 'Game already started'


class ColorUnavailable(LudoError):
    code = 'ColorUnavailable'
    default_message = 'Color not available for this game mode'


class ColorTaken(LudoError):
    code = 'ColorTaken'
    default_message = 'Color already taken'


class NotAllReady(LudoError):
    code = 'NotAllReady'
    default_message = 'Not all players are ready'


class GameNotStarted(LudoError):
    code = 'GameNotStarted'
    default_message = 'Game has not started'


class GameOver(LudoError):
    code = 'GameOver'
    default_message = 'Game is over'


class NotYourTurn(LudoError):
    code = 'NotYourTurn'
    default_message = 'Not your turn'


class AlreadyRolled(LudoError):
    code = 'AlreadyRolled'
    default_message = 'Already rolled, make your move'


class MustRollFirst(LudoError):
    code = 'MustRollFirst'
    default_message = 'Roll the dice first'


class InvalidPiece(LudoError):
    code = 'InvalidPiece'
    default_message = 'Invalid piece'


class InvalidMove(LudoError):
    code = 'InvalidMove'
    default_message = 'Invalid move'


class InvalidMessageFormat(LudoError):
    code = 'InvalidMessageFormat'
    default_message = 'Invalid message format'
