import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from tictactoe.errors import ErrorCode, GameError
from tictactoe.models import Member, Outcome, Role, Room, RoomStatus
from . import rules
from .registry import RoomRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinResult:
    role: Role
    already_joined: bool
    room: Room  # snapshot taken right after the join


@dataclass(frozen=True)
class MoveResult:
    board: Tuple[Optional[Role], ...]
    turn: Role
    outcome: Outcome


@dataclass(frozen=True)
class VoteResult:
    vote_count: int


@dataclass(frozen=True)
class RemoveResult:
    room_destroyed: bool
    had_member: bool
    remaining_count: int
    remaining: Tuple[str, ...] = ()


class RoomCoordinator:
    """Owns every live room and applies all room state transitions.

    Each operation runs under the room's own lock from the registry, checks
    everything it needs first and only then writes, so a refused request
    leaves the room untouched. Expected conflicts come back as ``GameError``
    values rather than exceptions.

    ``hasher`` needs ``generate_password_hash`` and ``check_password_hash``;
    the application wires in its Flask-Bcrypt instance.
    """

    def __init__(self, registry: RoomRegistry, hasher) -> None:
        self._registry = registry
        self._hasher = hasher

    @property
    def room_count(self) -> int:
        return len(self._registry)

    def close(self) -> None:
        self._registry.close()

    # ---- lifecycle ----

    def create_room(self, secret: str, connection_id: str) -> str:
        pass_key_hash = self._hasher.generate_password_hash(secret).decode('utf-8')
        room = self._registry.create(
            lambda room_id: Room(
                room_id=room_id,
                pass_key_hash=pass_key_hash,
                members=[Member(connection_id, Role.FIRST)],
            )
        )
        return room.room_id

    def join_room(self, room_id: str, secret: str, connection_id: str) -> Union[JoinResult, GameError]:
        candidate = self._registry.peek(room_id)
        if candidate is None:
            return GameError.of(ErrorCode.ROOM_NOT_FOUND)
        # The hash never changes, so verify before taking the room lock
        if not self._hasher.check_password_hash(candidate.pass_key_hash, secret):
            return GameError.of(ErrorCode.WRONG_PASSKEY)

        with self._registry.locked(room_id) as room:
            if room is None or room is not candidate:
                return GameError.of(ErrorCode.ROOM_NOT_FOUND)

            existing = room.member(connection_id)
            if existing is not None:
                return JoinResult(role=existing.role, already_joined=True, room=room.copy())
            if room.is_full:
                return GameError.of(ErrorCode.ROOM_FULL)

            role = room.members[0].role.other if room.members else Role.FIRST
            room.members.append(Member(connection_id, role))
            if room.is_full and room.status == RoomStatus.WAITING:
                room.status = RoomStatus.PLAYING
                logger.debug(f"[room-playing] room={room_id}")
            return JoinResult(role=role, already_joined=False, room=room.copy())

    def remove_member(self, room_id: str, connection_id: str) -> RemoveResult:
        with self._registry.locked(room_id) as room:
            if room is None:
                return RemoveResult(room_destroyed=False, had_member=False, remaining_count=0)

            member = room.member(connection_id)
            if member is None:
                return RemoveResult(
                    room_destroyed=False,
                    had_member=False,
                    remaining_count=len(room.members),
                    remaining=tuple(m.connection_id for m in room.members),
                )

            room.members.remove(member)
            if not room.members:
                self._registry.discard(room_id)
                logger.debug(f"[room-destroyed] room={room_id}")
                return RemoveResult(room_destroyed=True, had_member=True, remaining_count=0)

            # Whoever stays waits for a new partner from a fresh board
            for m in room.members:
                m.role = Role.FIRST
            room.status = RoomStatus.WAITING
            room.clear_board()
            room.turn = Role.FIRST
            room.starting_role = Role.FIRST
            room.replay_votes.clear()
            return RemoveResult(
                room_destroyed=False,
                had_member=True,
                remaining_count=len(room.members),
                remaining=tuple(m.connection_id for m in room.members),
            )

    # ---- queries ----

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._registry.locked(room_id) as room:
            return room.copy() if room is not None else None

    def role_of(self, room_id: str, connection_id: str) -> Optional[Role]:
        with self._registry.locked(room_id) as room:
            return room.role_of(connection_id) if room is not None else None

    def opponent_of(self, room_id: str, connection_id: str) -> Optional[str]:
        with self._registry.locked(room_id) as room:
            if room is None:
                return None
            for m in room.members:
                if m.connection_id != connection_id:
                    return m.connection_id
            return None

    def rooms_containing(self, connection_id: str) -> List[str]:
        found = []
        for room_id in self._registry.ids():
            with self._registry.locked(room_id) as room:
                if room is not None and room.member(connection_id) is not None:
                    found.append(room_id)
        return found

    # ---- play ----

    def apply_move_to_room(self, room_id: str, connection_id: str, index: int) -> Union[MoveResult, GameError]:
        with self._registry.locked(room_id) as room:
            if room is None:
                return GameError.of(ErrorCode.ROOM_NOT_FOUND)
            role = room.role_of(connection_id)
            if role is None:
                return GameError.of(ErrorCode.NOT_IN_ROOM)

            reason = rules.legal_move(room, role, index)
            if reason == ErrorCode.NOT_YOUR_TURN:
                return GameError.of(reason, f"It's {room.turn.value}'s turn, not yours")
            if reason is not None:
                return GameError.of(reason)

            outcome = rules.apply_move(room, index)
            return MoveResult(board=tuple(room.board), turn=room.turn, outcome=outcome)

    def register_replay_vote(self, room_id: str, connection_id: str) -> Union[VoteResult, GameError]:
        with self._registry.locked(room_id) as room:
            if room is None:
                return GameError.of(ErrorCode.ROOM_NOT_FOUND)
            if room.status != RoomStatus.ENDED:
                return GameError.of(ErrorCode.GAME_NOT_ENDED)
            if room.member(connection_id) is None:
                return GameError.of(ErrorCode.NOT_IN_ROOM)
            if connection_id in room.replay_votes:
                return GameError.of(ErrorCode.ALREADY_VOTED)

            room.replay_votes.add(connection_id)
            return VoteResult(vote_count=len(room.replay_votes))

    def reset_room(self, room_id: str) -> Optional[Room]:
        """Start the next game in an ended room, the other role opening.

        Returns None unless the room has ended with both seats taken.
        """
        with self._registry.locked(room_id) as room:
            if room is None or room.status != RoomStatus.ENDED or not room.is_full:
                return None
            room.clear_board()
            room.starting_role = room.starting_role.other
            room.turn = room.starting_role
            room.replay_votes.clear()
            room.status = RoomStatus.PLAYING
            return room.copy()
