# Models package
# Import all models here for convenience

from focusroom.models.user import User
from focusroom.models.room import Room, Participant, CursorPosition
from focusroom.models.content import ChatMessage, PomodoroSession

__all__ = [
    'User',
    'Room', 'Participant', 'CursorPosition',
    'ChatMessage', 'PomodoroSession'
]
