import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma separated list of origins allowed to open a socket
    CORS_ORIGINS = [o.strip() for o in os.environ.get('CORS_ORIGIN', 'http://localhost:5500').split(',') if o.strip()]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    # Cost factor for pass-key hashing
    BCRYPT_LOG_ROUNDS = int(os.environ.get('BCRYPT_LOG_ROUNDS', '10'))
    # Pre-hash with SHA-256 so multi-byte secrets stay under bcrypt's 72-byte cap
    BCRYPT_HANDLE_LONG_PASSWORDS = True
    PASSKEY_MIN_LENGTH = int(os.environ.get('PASSKEY_MIN_LENGTH', '4'))
    PASSKEY_MAX_LENGTH = int(os.environ.get('PASSKEY_MAX_LENGTH', '20'))
    ROOM_ID_LENGTH = int(os.environ.get('ROOM_ID_LENGTH', '6'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Dev server (run.py) only; the Werkzeug server refuses to start otherwise
    DEBUG = os.environ.get('FLASK_DEBUG', '1') == '1'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
