import logging
import random
import string
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional

from tictactoe.models import Room

logger = logging.getLogger(__name__)

ROOM_ID_ALPHABET = string.ascii_uppercase + string.digits


class RoomRegistry:
    """Process-wide store of live rooms.

    One registry lock guards the id -> room mapping (insert, lookup,
    delete). Each room also has its own lock, taken through ``locked``,
    which serialises every read-modify-write on that room. The registry
    lock is only ever taken briefly and never while waiting on a room lock,
    so rooms do not contend with each other.
    """

    def __init__(self, room_id_length: int = 6) -> None:
        self.room_id_length = room_id_length
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self._room_locks: Dict[str, threading.Lock] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def create(self, factory: Callable[[str], Room]) -> Room:
        """Register a new room under a fresh id produced for it."""
        with self._lock:
            room_id = self._fresh_id()
            room = factory(room_id)
            self._rooms[room_id] = room
            self._room_locks[room_id] = threading.Lock()
            live = len(self._rooms)
        logger.debug(f"[registry-add] room={room_id} live={live}")
        return room

    def peek(self, room_id: str) -> Optional[Room]:
        """Unlocked lookup; callers may only read fields that never change."""
        with self._lock:
            return self._rooms.get(room_id)

    @contextmanager
    def locked(self, room_id: str) -> Iterator[Optional[Room]]:
        """Hold the room's lock and yield it, or yield None if it is gone."""
        with self._lock:
            room = self._rooms.get(room_id)
            room_lock = self._room_locks.get(room_id)
        if room is None:
            yield None
            return
        with room_lock:
            # The room may have been destroyed while we waited
            with self._lock:
                live = self._rooms.get(room_id) is room
            yield room if live else None

    def discard(self, room_id: str) -> None:
        """Drop a room. Call while holding its lock."""
        with self._lock:
            self._rooms.pop(room_id, None)
            self._room_locks.pop(room_id, None)
        logger.debug(f"[registry-drop] room={room_id}")

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def close(self) -> None:
        with self._lock:
            count = len(self._rooms)
            self._rooms.clear()
            self._room_locks.clear()
        logger.info(f"[registry-close] dropped {count} live room(s)")

    def _fresh_id(self) -> str:
        while True:
            room_id = ''.join(random.choices(ROOM_ID_ALPHABET, k=self.room_id_length))
            if room_id not in self._rooms:
                return room_id
