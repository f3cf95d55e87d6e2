from tictactoe import create_app, socketio

app = create_app()

if __name__ == '__main__':
    try:
        socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], debug=app.config['DEBUG'])
    finally:
        app.extensions['room_coordinator'].close()
