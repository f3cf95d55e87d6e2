"""Game domain services: rules and room coordination.

This package contains the room state and game logic that the socket
handlers and HTTP routes call into, keeping transport concerns separated
from core game mechanics.
"""
from .coordinator import JoinResult, MoveResult, RemoveResult, RoomCoordinator, VoteResult
from .registry import RoomRegistry

__all__ = [
    "JoinResult",
    "MoveResult",
    "RemoveResult",
    "RoomCoordinator",
    "RoomRegistry",
    "VoteResult",
]
