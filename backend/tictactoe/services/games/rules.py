"""Tic-tac-toe rules: line scanning, move legality and move application.

Nothing here owns state; functions read (and, for ``apply_move``, write)
the room they are handed by the coordinator.
"""
from typing import Optional, Sequence, Tuple

from tictactoe.errors import ErrorCode
from tictactoe.models import BOARD_SIZE, DRAW, Outcome, Role, Room, RoomStatus

# Rows, then columns, then diagonals
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


def winner(board: Sequence[Optional[Role]], lines=WINNING_LINES) -> Optional[Role]:
    """Return the role holding a full line, or None."""
    for a, b, c in lines:
        if board[a] is not None and board[a] == board[b] == board[c]:
            return board[a]
    return None


def is_draw(board: Sequence[Optional[Role]]) -> bool:
    return all(cell is not None for cell in board) and winner(board) is None


def legal_move(room: Room, acting_role: Role, index: int) -> Optional[ErrorCode]:
    """Return None if ``acting_role`` may play ``index`` now, else the reason."""
    if room.status != RoomStatus.PLAYING:
        return ErrorCode.GAME_NOT_STARTED
    if acting_role != room.turn:
        return ErrorCode.NOT_YOUR_TURN
    if not 0 <= index < BOARD_SIZE:
        return ErrorCode.INVALID_CELL
    if room.board[index] is not None:
        return ErrorCode.CELL_TAKEN
    return None


def apply_move(room: Room, index: int) -> Outcome:
    """Place the current mover's mark and settle the result.

    Legality must already have been checked with ``legal_move``. Ends the
    game on a win or draw, otherwise passes the turn.
    """
    room.board[index] = room.turn

    won = winner(room.board)
    if won is not None:
        room.status = RoomStatus.ENDED
        return won
    if is_draw(room.board):
        room.status = RoomStatus.ENDED
        return DRAW

    room.turn = room.turn.other
    return None
