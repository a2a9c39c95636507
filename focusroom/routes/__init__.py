# Routes package

from focusroom.routes.auth import auth_bp
from focusroom.routes.rooms import rooms_bp
from focusroom.routes.presence import presence_bp
from focusroom.routes.stats import stats_bp
from focusroom.routes.chat import chat_bp

__all__ = ['auth_bp', 'rooms_bp', 'presence_bp', 'stats_bp', 'chat_bp']
