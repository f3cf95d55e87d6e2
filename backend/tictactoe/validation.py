"""Boundary checks for client payloads.

Each helper returns the cleaned value, or None when the input is malformed.
"""
from typing import Any, Optional

from tictactoe.models import BOARD_SIZE


def clean_room_id(value: Any, length: int = 6) -> Optional[str]:
    if not isinstance(value, str):
        return None
    room_id = value.strip().upper()
    if len(room_id) != length or not room_id.isascii() or not room_id.isalnum():
        return None
    return room_id


def clean_secret(value: Any, min_length: int = 4, max_length: int = 20) -> Optional[str]:
    if not isinstance(value, str) or not min_length <= len(value) <= max_length:
        return None
    return value


def clean_index(value: Any) -> Optional[int]:
    # bool is an int subclass but never a valid cell
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    if not 0 <= value < BOARD_SIZE:
        return None
    return value
