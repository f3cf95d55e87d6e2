from flask import Flask
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

bcrypt = Bcrypt()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    bcrypt.init_app(flask_app)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One room registry per process, shared by every connection
    from tictactoe.services.games import RoomCoordinator, RoomRegistry
    registry = RoomRegistry(room_id_length=flask_app.config.get('ROOM_ID_LENGTH', 6))
    flask_app.extensions['room_coordinator'] = RoomCoordinator(registry, bcrypt)

    # Import and register blueprints here
    from tictactoe.routes import main
    flask_app.register_blueprint(main)

    from tictactoe.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from tictactoe.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/'))

    return flask_app
