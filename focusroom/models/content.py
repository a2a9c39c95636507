# Append-only content: chat messages and completed timer sessions

from focusroom.extensions import db
from focusroom.functions.clock import now_ms


class ChatMessage(db.Model):
    # Spatial chat message, anchored at the sender's cursor
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, nullable=False, index=True)
    user_id = db.Column(db.String(255), nullable=False)
    user_name = db.Column(db.String(150), nullable=False)
    user_initial = db.Column(db.String(4), nullable=False)
    user_avatar_url = db.Column(db.String(500), nullable=True)
    message = db.Column(db.Text, nullable=False)
    cursor_x = db.Column(db.Float, nullable=False)
    cursor_y = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_ms, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'room_id': self.room_id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'user_initial': self.user_initial,
            'user_avatar_url': self.user_avatar_url,
            'message': self.message,
            'cursor_x': self.cursor_x,
            'cursor_y': self.cursor_y,
            'created_at': self.created_at,
        }


class PomodoroSession(db.Model):
    # Completed (fully or partially) timer run; leaderboards read only this table
    id = db.Column(db.Integer, primary_key=True)
    room_id = db.Column(db.Integer, nullable=False, index=True)
    user_id = db.Column(db.String(255), nullable=False, index=True)
    user_name = db.Column(db.String(150), nullable=False)
    user_initial = db.Column(db.String(4), nullable=True)
    user_avatar_url = db.Column(db.String(500), nullable=True)
    timer_type = db.Column(db.String(10), nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # seconds actually completed
    task = db.Column(db.Text, nullable=False, default='')
    completed_at = db.Column(db.BigInteger, nullable=False, default=now_ms, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'room_id': self.room_id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'user_initial': self.user_initial,
            'user_avatar_url': self.user_avatar_url,
            'timer_type': self.timer_type,
            'duration': self.duration,
            'task': self.task,
            'completed_at': self.completed_at,
        }
