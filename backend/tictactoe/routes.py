from flask import Blueprint, jsonify, current_app

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the tic-tac-toe room server!'})

@main.route('/health')
def health():
    coordinator = current_app.extensions['room_coordinator']
    return jsonify({'status': 'ok', 'rooms': coordinator.room_count})
