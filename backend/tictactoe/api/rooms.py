from flask import Blueprint, jsonify, current_app
from tictactoe.errors import ErrorCode, GameError
from tictactoe.validation import clean_room_id

rooms = Blueprint('rooms', __name__)


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room_summary(room_id):
    """
    Returns the public state of a room. The pass-key hash is never exposed.
    """
    cleaned = clean_room_id(room_id, current_app.config.get('ROOM_ID_LENGTH', 6))
    if cleaned is None:
        return jsonify(GameError.of(ErrorCode.INVALID_ROOM_ID).to_dict()), 400

    room = current_app.extensions['room_coordinator'].get_room(cleaned)
    if room is None:
        return jsonify(GameError.of(ErrorCode.ROOM_NOT_FOUND).to_dict()), 404
    return jsonify(room.to_dict()), 200
