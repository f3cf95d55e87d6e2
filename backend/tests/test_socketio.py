from tictactoe.services.games import RoomCoordinator


def _events(sio_client, name):
    return [pkt['args'][0] for pkt in sio_client.get_received() if pkt['name'] == name]


def _by_name(received):
    grouped = {}
    for pkt in received:
        grouped.setdefault(pkt['name'], []).append(pkt['args'][0] if pkt['args'] else None)
    return grouped


def _create(sio_client, secret='abcd'):
    sio_client.emit('create_room', {'secret': secret})
    created = _events(sio_client, 'room_created')
    assert len(created) == 1
    return created[0]['roomId']


def _start_game(sio_factory):
    host = sio_factory()
    guest = sio_factory()
    room_id = _create(host)
    guest.emit('join_room', {'roomId': room_id, 'secret': 'abcd'})
    host.get_received()
    guest.get_received()
    return host, guest, room_id


def test_socket_connect_announces_sid(flask_app):
    from tictactoe import socketio
    test_client = socketio.test_client(flask_app)
    assert test_client.is_connected()
    received = test_client.get_received()
    assert any(pkt['name'] == 'connected' and pkt['args'][0]['sid'] for pkt in received)
    test_client.disconnect()


def test_create_and_join_sends_game_start_to_both(sio_factory):
    host = sio_factory()
    guest = sio_factory()
    room_id = _create(host)
    assert len(room_id) == 6

    guest.emit('join_room', {'roomId': room_id.lower(), 'secret': 'abcd'})
    host_start = _events(host, 'game_start')
    guest_start = _events(guest, 'game_start')
    assert host_start == [{'board': [None] * 9, 'turn': 'X', 'role': 'X'}]
    assert guest_start == [{'board': [None] * 9, 'turn': 'X', 'role': 'O'}]


def test_rejoin_resends_state_to_that_connection_only(sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    guest.emit('join_room', {'roomId': room_id, 'secret': 'abcd'})
    assert _events(guest, 'game_start') == [{'board': [None] * 9, 'turn': 'X', 'role': 'O'}]
    assert _events(host, 'game_start') == []


def test_moves_broadcast_board_updates_until_win(sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    for player, index in [(host, 0), (guest, 1), (host, 4), (guest, 2)]:
        player.emit('make_move', {'roomId': room_id, 'index': index})
    host.emit('make_move', {'roomId': room_id, 'index': 8})

    host_updates = _events(host, 'board_update')
    guest_updates = _events(guest, 'board_update')
    assert host_updates == guest_updates
    assert len(host_updates) == 5
    assert host_updates[0] == {'board': ['X'] + [None] * 8, 'turn': 'O', 'outcome': None}
    assert host_updates[-1] == {
        'board': ['X', 'O', 'O', None, 'X', None, None, None, 'X'],
        'turn': 'X',
        'outcome': 'X',
    }


def test_state_errors_go_only_to_originator(sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    guest.emit('make_move', {'roomId': room_id, 'index': 0})
    guest_events = _by_name(guest.get_received())
    assert guest_events['error'][0]['code'] == 'NOT_YOUR_TURN'
    assert 'board_update' not in guest_events
    assert host.get_received() == []


def test_wrong_passkey_and_full_room(sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    stranger = sio_factory()
    stranger.emit('join_room', {'roomId': room_id, 'secret': 'nope'})
    assert _events(stranger, 'error')[0]['code'] == 'WRONG_PASSKEY'
    stranger.emit('join_room', {'roomId': room_id, 'secret': 'abcd'})
    assert _events(stranger, 'error')[0]['code'] == 'ROOM_FULL'
    stranger.emit('join_room', {'roomId': 'ZZZZZZ', 'secret': 'abcd'})
    assert _events(stranger, 'error')[0]['code'] == 'ROOM_NOT_FOUND'


def test_input_validation_codes(sio_factory):
    sio_client = sio_factory()
    cases = [
        ('create_room', {'secret': 'abc'}, 'INVALID_PASSKEY'),
        ('create_room', {'secret': 'x' * 21}, 'INVALID_PASSKEY'),
        ('create_room', {}, 'INVALID_PASSKEY'),
        ('create_room', 'not-a-dict', 'INVALID_PASSKEY'),
        ('join_room', {'roomId': 'ABC', 'secret': 'abcd'}, 'INVALID_ROOM_ID'),
        ('join_room', {'roomId': 123456, 'secret': 'abcd'}, 'INVALID_ROOM_ID'),
        ('join_room', {'roomId': 'ABC12!', 'secret': 'abcd'}, 'INVALID_ROOM_ID'),
        ('join_room', {'roomId': 'ABC123', 'secret': 7}, 'INVALID_PASSKEY'),
        ('make_move', {'index': 0}, 'INVALID_ROOM_ID'),
        ('make_move', {'roomId': 'ABC123', 'index': 9}, 'INVALID_CELL'),
        ('make_move', {'roomId': 'ABC123', 'index': '3'}, 'INVALID_CELL'),
        ('make_move', {'roomId': 'ABC123', 'index': True}, 'INVALID_CELL'),
        ('make_move', {'roomId': 'ABC123', 'index': 1.0}, 'INVALID_CELL'),
        ('replay_vote', {}, 'INVALID_ROOM_ID'),
    ]
    for event, payload, code in cases:
        sio_client.emit(event, payload)
        errors = _events(sio_client, 'error')
        assert [e['code'] for e in errors] == [code], (event, payload)


def test_replay_flow_restarts_with_other_role_opening(sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    for player, index in [(host, 0), (guest, 1), (host, 4), (guest, 2), (host, 8)]:
        player.emit('make_move', {'roomId': room_id, 'index': index})
    host.get_received()
    guest.get_received()

    host.emit('replay_vote', {'roomId': room_id})
    assert _events(guest, 'replay_update') == [{'voteCount': 1}]
    host.emit('replay_vote', {'roomId': room_id})
    assert _events(host, 'error')[-1]['code'] == 'ALREADY_VOTED'

    guest.emit('replay_vote', {'roomId': room_id})
    host_events = _by_name(host.get_received())
    guest_events = _by_name(guest.get_received())
    assert host_events['replay_update'] == [{'voteCount': 2}]
    assert host_events['game_start'] == [{'board': [None] * 9, 'turn': 'O', 'role': 'X'}]
    assert guest_events['game_start'] == [{'board': [None] * 9, 'turn': 'O', 'role': 'O'}]

    guest.emit('make_move', {'roomId': room_id, 'index': 4})
    assert _events(host, 'board_update')[0]['turn'] == 'X'


def test_replay_before_game_end_is_rejected(sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    host.emit('replay_vote', {'roomId': room_id})
    assert _events(host, 'error')[0]['code'] == 'GAME_NOT_ENDED'


def test_leave_notifies_remaining_member(flask_app, sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    guest.emit('leave_room', {'roomId': room_id})
    assert _events(host, 'player_left') == [{}]
    assert guest.get_received() == []

    room = flask_app.extensions['room_coordinator'].get_room(room_id)
    assert room.status.value == 'waiting'
    assert len(room.members) == 1

    host.emit('leave_room', {'roomId': room_id})
    assert flask_app.extensions['room_coordinator'].get_room(room_id) is None


def test_leave_with_bad_room_id_is_ignored(sio_factory):
    sio_client = sio_factory()
    sio_client.emit('leave_room', {'roomId': 42})
    assert sio_client.get_received() == []


def test_disconnect_notifies_opponent_and_new_partner_can_join(flask_app, sio_factory):
    host, guest, room_id = _start_game(sio_factory)
    guest.disconnect()
    assert _events(host, 'player_left') == [{}]

    newcomer = sio_factory()
    newcomer.emit('join_room', {'roomId': room_id, 'secret': 'abcd'})
    assert _events(newcomer, 'game_start') == [{'board': [None] * 9, 'turn': 'X', 'role': 'O'}]
    assert _events(host, 'game_start') == [{'board': [None] * 9, 'turn': 'X', 'role': 'X'}]


def test_last_disconnect_destroys_room(flask_app, sio_factory):
    host = sio_factory()
    room_id = _create(host)
    coordinator = flask_app.extensions['room_coordinator']
    assert coordinator.get_room(room_id) is not None
    host.disconnect()
    assert coordinator.get_room(room_id) is None


def test_unexpected_failure_reports_internal_error(monkeypatch, flask_app, sio_factory):
    host, guest, room_id = _start_game(sio_factory)

    def explode(self, *args, **kwargs):
        raise RuntimeError('boom')

    monkeypatch.setattr(RoomCoordinator, 'apply_move_to_room', explode)
    host.emit('make_move', {'roomId': room_id, 'index': 0})
    errors = _events(host, 'error')
    assert errors == [{'code': 'INTERNAL_ERROR', 'message': 'Failed to make move'}]
    assert guest.get_received() == []
    assert flask_app.extensions['room_coordinator'].get_room(room_id).board == [None] * 9


def test_multibyte_secret_at_max_length_creates_room(sio_factory):
    host = sio_factory()
    host.emit('create_room', {'secret': '\U0001F600' * 20})
    events = _by_name(host.get_received())
    assert 'error' not in events
    assert len(events['room_created']) == 1


def test_multibyte_secret_join_checks_pass_key(sio_factory):
    host = sio_factory()
    guest = sio_factory()
    room_id = _create(host)
    guest.emit('join_room', {'roomId': room_id, 'secret': '\U0001F600' * 19})
    assert [e['code'] for e in _events(guest, 'error')] == ['WRONG_PASSKEY']

    secret = '\U0001F600' * 20
    other_host = sio_factory()
    other_guest = sio_factory()
    other_id = _create(other_host, secret=secret)
    other_guest.emit('join_room', {'roomId': other_id, 'secret': secret})
    assert _events(other_guest, 'game_start') == [{'board': [None] * 9, 'turn': 'X', 'role': 'O'}]
