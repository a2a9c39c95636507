# Configuration file for the focusroom application

import json
import os

# Try to load configuration from `config.json` located next to this file.
# If the file is missing or a key is absent, fall back to the defaults below.
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
_JSON_PATH = os.path.join(_BASE_DIR, 'config.json')

# Defaults
_defaults = {
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///focusroom.db',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'SECRET_KEY': 'change-me-focusroom',
    # Shared secret the identity provider presents when syncing a user session
    'IDENTITY_SHARED_SECRET': 'change-me-identity',
    # Presence windows (milliseconds)
    'PARTICIPANT_LIVENESS_MS': 30000,
    'CURSOR_LIVENESS_MS': 5000,
    # Chat
    'CHAT_HISTORY_LIMIT': 100,
    'CHAT_MESSAGE_MAX_LENGTH': 500,
    # Socket.IO worker model: 'eventlet' in production, 'threading' for tests
    'SOCKETIO_ASYNC_MODE': 'eventlet',
    'LOG_LEVEL': 'INFO',
}

_cfg = {}
try:
    with open(_JSON_PATH, 'r', encoding='utf-8') as f:
        _cfg = json.load(f) or {}
except FileNotFoundError:
    # No config.json present, use defaults
    _cfg = {}
except ValueError:
    # Unparseable config.json, use defaults
    _cfg = {}


# Helper to get value from JSON or defaults
def _get(key):
    return _cfg.get(key, _defaults.get(key))


# Database
SQLALCHEMY_DATABASE_URI = _get('SQLALCHEMY_DATABASE_URI')
SQLALCHEMY_TRACK_MODIFICATIONS = _get('SQLALCHEMY_TRACK_MODIFICATIONS')

# Security
SECRET_KEY = _get('SECRET_KEY')
IDENTITY_SHARED_SECRET = _get('IDENTITY_SHARED_SECRET')

# Presence
PARTICIPANT_LIVENESS_MS = int(_get('PARTICIPANT_LIVENESS_MS'))
CURSOR_LIVENESS_MS = int(_get('CURSOR_LIVENESS_MS'))

# Chat
CHAT_HISTORY_LIMIT = int(_get('CHAT_HISTORY_LIMIT'))
CHAT_MESSAGE_MAX_LENGTH = int(_get('CHAT_MESSAGE_MAX_LENGTH'))

# Runtime
SOCKETIO_ASYNC_MODE = _get('SOCKETIO_ASYNC_MODE')
LOG_LEVEL = _get('LOG_LEVEL')
