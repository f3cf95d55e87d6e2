import os
import sys
import pytest

# Ensure the backend root (containing the `tictactoe` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tictactoe import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5500']
    SOCKETIO_NAMESPACE = '/'
    # Lowest cost bcrypt accepts, keeps hashing fast
    BCRYPT_LOG_ROUNDS = 4
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    PASSKEY_MIN_LENGTH = 4
    PASSKEY_MAX_LENGTH = 20
    ROOM_ID_LENGTH = 6
    LOG_LEVEL = 'DEBUG'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['room_coordinator'].close()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def coordinator(flask_app):
    return flask_app.extensions['room_coordinator']


@pytest.fixture()
def sio_factory(flask_app):
    """Build Socket.IO test clients; all are disconnected at teardown."""
    created = []

    def make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        created.append(test_client)
        # Flush the initial 'connected' event
        test_client.get_received()
        return test_client

    yield make
    for test_client in created:
        if test_client.is_connected():
            test_client.disconnect()
