# Lookups shared by the room blueprints

from flask_login import current_user
from focusroom.errors import NotFound
from focusroom.extensions import db
from focusroom.models import Room, Participant


def get_room(room_id):
    room = db.session.get(Room, room_id)
    if not room:
        raise NotFound('Room not found')
    return room


def find_participant(room_id, user_id=None):
    return Participant.query.filter_by(
        room_id=room_id,
        user_id=user_id or current_user.id
    ).first()


def get_own_participant(room_id):
    # Caller's participant row; mutations on presence require it
    participant = find_participant(room_id)
    if not participant:
        raise NotFound('Not a participant in this room')
    return participant
