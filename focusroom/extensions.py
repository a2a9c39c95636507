# Flask extensions initialization
# Helps avoid circular imports by initializing extensions without app context

from flask_sqlalchemy import SQLAlchemy
from flask_socketio import SocketIO
from flask_login import LoginManager

db = SQLAlchemy()
# async_mode is chosen per app in create_app (SOCKETIO_ASYNC_MODE)
socketio = SocketIO(
    cors_allowed_origins='*',
    ping_timeout=60,
    ping_interval=25,
    manage_session=True,
    path='socket.io',
    engineio_logger=False,
    socketio_logger=False
)
login_manager = LoginManager()
