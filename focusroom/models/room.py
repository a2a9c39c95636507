# Room and presence models: rooms, participants, cursors

from focusroom.extensions import db
from focusroom.functions.clock import now_ms
from focusroom.functions.timing import TIMER_DURATIONS


class Room(db.Model):
    # Focus room owned by an identity subject
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    owner_id = db.Column(db.String(255), nullable=False, index=True)
    visibility = db.Column(db.String(10), nullable=False, default='public', index=True)  # 'public', 'private'
    join_code = db.Column(db.String(16), nullable=True)
    theme = db.Column(db.String(50), nullable=False)
    music_url = db.Column(db.String(500), nullable=True)
    max_users = db.Column(db.Integer, nullable=True)  # None means unlimited
    created_at = db.Column(db.BigInteger, nullable=False, default=now_ms)


class Participant(db.Model):
    # A user's presence inside a room; one row per (room, user)
    __table_args__ = (
        db.UniqueConstraint('room_id', 'user_id', name='uq_participant_room_user'),
    )

    id = db.Column(db.Integer, primary_key=True)
    # Weak reference: rows are removed explicitly, not through FK cascades
    room_id = db.Column(db.Integer, nullable=False, index=True)
    user_id = db.Column(db.String(255), nullable=False)

    # Cached identity
    user_name = db.Column(db.String(150), nullable=False)
    user_initial = db.Column(db.String(4), nullable=False)
    user_avatar_url = db.Column(db.String(500), nullable=True)

    # Percentages of the room's width/height
    position_x = db.Column(db.Float, nullable=False, default=50)
    position_y = db.Column(db.Float, nullable=False, default=50)

    # Timer
    timer_state = db.Column(db.String(10), nullable=False, default='idle')  # 'idle', 'running', 'paused'
    timer_type = db.Column(db.String(10), nullable=True, default='pomodoro')  # NULL on legacy rows
    time_left = db.Column(db.Integer, nullable=False, default=TIMER_DURATIONS['pomodoro'])
    pomodoro_count = db.Column(db.Integer, nullable=True, default=0)
    timer_version = db.Column(db.Integer, nullable=True, default=0)
    task = db.Column(db.Text, nullable=False, default='')

    last_seen = db.Column(db.BigInteger, nullable=False, default=now_ms)

    def to_dict(self):
        # Display-safe projection; legacy NULL columns read as their defaults
        return {
            'id': self.id,
            'room_id': self.room_id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'user_initial': self.user_initial,
            'user_avatar_url': self.user_avatar_url,
            'position_x': self.position_x,
            'position_y': self.position_y,
            'timer_state': self.timer_state,
            'timer_type': self.timer_type or 'pomodoro',
            'time_left': self.time_left,
            'pomodoro_count': self.pomodoro_count or 0,
            'timer_version': self.timer_version or 0,
            'task': self.task or '',
            'last_seen': self.last_seen,
        }

    def timer_dict(self):
        return {
            'timer_state': self.timer_state,
            'timer_type': self.timer_type or 'pomodoro',
            'time_left': self.time_left,
            'pomodoro_count': self.pomodoro_count or 0,
            'timer_version': self.timer_version or 0,
        }


class CursorPosition(db.Model):
    # Live cursor and typing preview; one row per (room, user)
    __table_args__ = (
        db.UniqueConstraint('room_id', 'user_id', name='uq_cursor_room_user'),
    )

    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, nullable=False, index=True)
    user_id = db.Column(db.String(255), nullable=False)
    user_name = db.Column(db.String(150), nullable=False)
    user_initial = db.Column(db.String(4), nullable=False)
    user_avatar_url = db.Column(db.String(500), nullable=True)
    cursor_x = db.Column(db.Float, nullable=False)
    cursor_y = db.Column(db.Float, nullable=False)
    typing_text = db.Column(db.Text, nullable=True)
    last_seen = db.Column(db.BigInteger, nullable=False, default=now_ms)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'user_name': self.user_name,
            'user_initial': self.user_initial,
            'user_avatar_url': self.user_avatar_url,
            'cursor_x': self.cursor_x,
            'cursor_y': self.cursor_y,
            'typing_text': self.typing_text,
            'last_seen': self.last_seen,
        }
