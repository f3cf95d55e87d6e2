import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Set, Union

BOARD_SIZE = 9
DRAW = 'draw'


class Role(str, Enum):
    FIRST = 'X'
    SECOND = 'O'

    @property
    def other(self) -> 'Role':
        return Role.SECOND if self is Role.FIRST else Role.FIRST


class RoomStatus(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    ENDED = 'ended'


# A winning role, DRAW, or None while the game continues
Outcome = Optional[Union[Role, str]]
Board = List[Optional[Role]]


def empty_board() -> Board:
    return [None] * BOARD_SIZE


def board_to_wire(board) -> list:
    return [cell.value if cell is not None else None for cell in board]


def outcome_to_wire(outcome: Outcome) -> Optional[str]:
    if isinstance(outcome, Role):
        return outcome.value
    return outcome


@dataclass
class Member:
    connection_id: str
    role: Role


@dataclass
class Room:
    """A two-seat game session guarded by a hashed pass key.

    Instances are owned by the room coordinator; everything handed out to
    callers is a copy.
    """

    room_id: str
    pass_key_hash: str
    members: List[Member] = field(default_factory=list)
    board: Board = field(default_factory=empty_board)
    turn: Role = Role.FIRST
    status: RoomStatus = RoomStatus.WAITING
    replay_votes: Set[str] = field(default_factory=set)
    starting_role: Role = Role.FIRST

    def member(self, connection_id: str) -> Optional[Member]:
        for m in self.members:
            if m.connection_id == connection_id:
                return m
        return None

    def role_of(self, connection_id: str) -> Optional[Role]:
        m = self.member(connection_id)
        return m.role if m else None

    @property
    def is_full(self) -> bool:
        return len(self.members) >= 2

    def clear_board(self) -> None:
        self.board = empty_board()

    def copy(self) -> 'Room':
        return copy.deepcopy(self)

    def state_for(self, role: Role) -> dict:
        """Payload a member receives when a game (re)starts."""
        return {
            'board': board_to_wire(self.board),
            'turn': self.turn.value,
            'role': role.value,
        }

    def to_dict(self) -> dict:
        return {
            'roomId': self.room_id,
            'status': self.status.value,
            'playerCount': len(self.members),
            'board': board_to_wire(self.board),
            'turn': self.turn.value,
        }
