import functools
from enum import Enum
from typing import Any, Dict, Optional

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from tictactoe import socketio
from tictactoe.errors import ErrorCode, GameError
from tictactoe.models import RoomStatus, board_to_wire, outcome_to_wire
from tictactoe.validation import clean_index, clean_room_id, clean_secret


class InboundEvent(str, Enum):
    CONNECT = 'connect'
    DISCONNECT = 'disconnect'
    CREATE_ROOM = 'create_room'
    JOIN_ROOM = 'join_room'
    MAKE_MOVE = 'make_move'
    REPLAY_VOTE = 'replay_vote'
    LEAVE_ROOM = 'leave_room'


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _coordinator():
    return current_app.extensions['room_coordinator']

def _payload(data: Any) -> Dict[str, Any]:
    return data if isinstance(data, dict) else {}

def _send_error(error: GameError) -> None:
    emit('error', error.to_dict())

def _room_id_from(payload: Dict[str, Any]) -> Optional[str]:
    return clean_room_id(payload.get('roomId'), current_app.config.get('ROOM_ID_LENGTH', 6))

def _secret_from(payload: Dict[str, Any]) -> Optional[str]:
    cfg = current_app.config
    return clean_secret(
        payload.get('secret'),
        cfg.get('PASSKEY_MIN_LENGTH', 4),
        cfg.get('PASSKEY_MAX_LENGTH', 20),
    )

def _invalid_passkey() -> GameError:
    cfg = current_app.config
    return GameError.of(
        ErrorCode.INVALID_PASSKEY,
        f"Pass key must be {cfg.get('PASSKEY_MIN_LENGTH', 4)}-{cfg.get('PASSKEY_MAX_LENGTH', 20)} characters",
    )


def _guarded(failure_message: Optional[str]):
    """Turn unexpected faults into a generic INTERNAL_ERROR for the sender.

    Handlers with no failure message (leave, disconnect) only log.
    """
    def decorator(handler):
        @functools.wraps(handler)
        def wrapper(*args):
            try:
                return handler(*args)
            except Exception:
                current_app.logger.exception(f"[{handler.__name__}] failed sid={_get_sid()}")
                if failure_message:
                    _send_error(GameError.of(ErrorCode.INTERNAL_ERROR, failure_message))
        return wrapper
    return decorator


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('connected', {'sid': _get_sid()})


@_guarded(None)
def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    coordinator = _coordinator()
    for room_id in coordinator.rooms_containing(sid):
        result = coordinator.remove_member(room_id, sid)
        if result.had_member:
            for remaining_sid in result.remaining:
                emit('player_left', {}, to=remaining_sid)
        current_app.logger.info(
            f"[player-dropped] room={room_id} sid={sid} destroyed={result.room_destroyed}"
        )


@_guarded('Failed to create room')
def handle_create_room(data=None):
    payload = _payload(data)
    secret = _secret_from(payload)
    if secret is None:
        _send_error(_invalid_passkey())
        return

    room_id = _coordinator().create_room(secret, _get_sid())
    # Creator also joins the broadcast group to receive game_start
    join_room(room_id)
    emit('room_created', {'roomId': room_id})
    current_app.logger.info(f"[room-created] room={room_id} sid={_get_sid()}")


@_guarded('Failed to join room')
def handle_join_room(data=None):
    """Admit a connection and announce the game from the join snapshot.

    game_start is sent after the room lock is released. If the other member
    drops in that window, its player_left can arrive before this game_start;
    clients treat player_left as authoritative and wait for the next start.
    """
    payload = _payload(data)
    room_id = _room_id_from(payload)
    if room_id is None:
        _send_error(GameError.of(ErrorCode.INVALID_ROOM_ID))
        return
    secret = _secret_from(payload)
    if secret is None:
        _send_error(_invalid_passkey())
        return

    result = _coordinator().join_room(room_id, secret, _get_sid())
    if isinstance(result, GameError):
        _send_error(result)
        return

    join_room(room_id)
    room = result.room
    if result.already_joined:
        # Reconnection: resend the current state to this connection only
        emit('game_start', room.state_for(result.role))
        return

    if room.status == RoomStatus.PLAYING:
        for member in room.members:
            emit('game_start', room.state_for(member.role), to=member.connection_id)
        current_app.logger.info(f"[game-start] room={room_id}")
    else:
        emit('game_start', room.state_for(result.role))


@_guarded('Failed to make move')
def handle_make_move(data=None):
    payload = _payload(data)
    room_id = _room_id_from(payload)
    if room_id is None:
        _send_error(GameError.of(ErrorCode.INVALID_ROOM_ID))
        return
    index = clean_index(payload.get('index'))
    if index is None:
        _send_error(GameError.of(ErrorCode.INVALID_CELL))
        return

    result = _coordinator().apply_move_to_room(room_id, _get_sid(), index)
    if isinstance(result, GameError):
        _send_error(result)
        return

    emit('board_update', {
        'board': board_to_wire(result.board),
        'turn': result.turn.value,
        'outcome': outcome_to_wire(result.outcome),
    }, to=room_id)
    if result.outcome is not None:
        current_app.logger.info(f"[game-over] room={room_id} outcome={outcome_to_wire(result.outcome)}")


@_guarded('Failed to process replay request')
def handle_replay_vote(data=None):
    payload = _payload(data)
    room_id = _room_id_from(payload)
    if room_id is None:
        _send_error(GameError.of(ErrorCode.INVALID_ROOM_ID))
        return

    coordinator = _coordinator()
    result = coordinator.register_replay_vote(room_id, _get_sid())
    if isinstance(result, GameError):
        _send_error(result)
        return

    emit('replay_update', {'voteCount': result.vote_count}, to=room_id)
    if result.vote_count < 2:
        return

    room = coordinator.reset_room(room_id)
    if room is None:
        return
    for member in room.members:
        emit('game_start', room.state_for(member.role), to=member.connection_id)
    current_app.logger.info(f"[game-restart] room={room_id} opening={room.turn.value}")


@_guarded(None)
def handle_leave_room(data=None):
    payload = _payload(data)
    room_id = _room_id_from(payload)
    if room_id is None:
        return

    sid = _get_sid()
    leave_room(room_id)
    result = _coordinator().remove_member(room_id, sid)
    if result.had_member:
        for remaining_sid in result.remaining:
            emit('player_left', {}, to=remaining_sid)
    current_app.logger.info(f"[player-left] room={room_id} sid={sid} destroyed={result.room_destroyed}")


EVENT_HANDLERS = {
    InboundEvent.CONNECT: handle_connect,
    InboundEvent.DISCONNECT: handle_disconnect,
    InboundEvent.CREATE_ROOM: handle_create_room,
    InboundEvent.JOIN_ROOM: handle_join_room,
    InboundEvent.MAKE_MOVE: handle_make_move,
    InboundEvent.REPLAY_VOTE: handle_replay_vote,
    InboundEvent.LEAVE_ROOM: handle_leave_room,
}


def register_socketio_handlers(namespace: str = '/') -> None:
    """Bind every inbound event in EVENT_HANDLERS on ``namespace``."""
    for event, handler in EVENT_HANDLERS.items():
        socketio.on_event(event.value, handler, namespace=namespace)
