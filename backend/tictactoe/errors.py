from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    ROOM_NOT_FOUND = 'ROOM_NOT_FOUND'
    WRONG_PASSKEY = 'WRONG_PASSKEY'
    ROOM_FULL = 'ROOM_FULL'
    NOT_YOUR_TURN = 'NOT_YOUR_TURN'
    CELL_TAKEN = 'CELL_TAKEN'
    GAME_NOT_STARTED = 'GAME_NOT_STARTED'
    INVALID_PASSKEY = 'INVALID_PASSKEY'
    INVALID_ROOM_ID = 'INVALID_ROOM_ID'
    INVALID_CELL = 'INVALID_CELL'
    NOT_IN_ROOM = 'NOT_IN_ROOM'
    GAME_NOT_ENDED = 'GAME_NOT_ENDED'
    ALREADY_VOTED = 'ALREADY_VOTED'
    INTERNAL_ERROR = 'INTERNAL_ERROR'


DEFAULT_MESSAGES = {
    ErrorCode.ROOM_NOT_FOUND: 'Room not found',
    ErrorCode.WRONG_PASSKEY: 'Incorrect pass key',
    ErrorCode.ROOM_FULL: 'Room is full',
    ErrorCode.NOT_YOUR_TURN: 'It is not your turn',
    ErrorCode.CELL_TAKEN: 'This cell is already taken',
    ErrorCode.GAME_NOT_STARTED: 'The game has not started yet',
    ErrorCode.INVALID_PASSKEY: 'Pass key must be 4-20 characters',
    ErrorCode.INVALID_ROOM_ID: 'Room ID must be 6 characters',
    ErrorCode.INVALID_CELL: 'Cell index must be 0-8',
    ErrorCode.NOT_IN_ROOM: 'You are not in this room',
    ErrorCode.GAME_NOT_ENDED: 'Game has not ended yet',
    ErrorCode.ALREADY_VOTED: 'You have already voted for replay',
    ErrorCode.INTERNAL_ERROR: 'Internal server error',
}


@dataclass(frozen=True)
class GameError:
    """Structured failure returned by room operations.

    Always addressed to the connection that issued the request.
    """

    code: ErrorCode
    message: str

    @classmethod
    def of(cls, code: ErrorCode, message: Optional[str] = None) -> 'GameError':
        return cls(code=code, message=message or DEFAULT_MESSAGES[code])

    def to_dict(self) -> dict:
        return {'code': self.code.value, 'message': self.message}
