# Room management routes (list, get, create, update, delete)

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy import or_
from focusroom.errors import NotAuthorized, ValidationError
from focusroom.extensions import db
from focusroom.functions import clock, generate_join_code
from focusroom.functions.validation import (
    get_json_payload, require_string, optional_string, optional_int, require_choice
)
from focusroom.models import Room, Participant, CursorPosition, ChatMessage
from focusroom.routes.common import get_room, find_participant
from focusroom.sockets import notify_room

rooms_bp = Blueprint('rooms', __name__)

VISIBILITIES = ('public', 'private')


def _caller_id():
    return current_user.id if current_user.is_authenticated else None


def room_to_dict(room, include_join_code=False):
    data = {
        'id': room.id,
        'name': room.name,
        'owner_id': room.owner_id,
        'visibility': room.visibility,
        'theme': room.theme,
        'music_url': room.music_url,
        'max_users': room.max_users,
        'created_at': room.created_at,
    }
    if include_join_code:
        data['join_code'] = room.join_code
    return data


def _can_see_join_code(room):
    # Owner, or someone already holding a participant row
    caller = _caller_id()
    if caller is None:
        return False
    return room.owner_id == caller or find_participant(room.id, caller) is not None


def _apply_visibility(room, visibility):
    # Flipping to private always issues a fresh code; public rooms carry none
    if visibility == 'private' and (room.visibility != 'private' or not room.join_code):
        room.join_code = generate_join_code()
    elif visibility == 'public':
        room.join_code = None
    room.visibility = visibility


def _require_owner(room):
    if room.owner_id != current_user.id:
        raise NotAuthorized('Only the room owner can do this')


@rooms_bp.route('/rooms')
def list_rooms():
    # Public rooms plus the caller's own rooms, newest first
    caller = _caller_id()
    query = Room.query
    if caller is None:
        query = query.filter(Room.visibility == 'public')
    else:
        query = query.filter(or_(Room.visibility == 'public', Room.owner_id == caller))
    rooms = query.order_by(Room.created_at.desc(), Room.id.desc()).all()
    return jsonify({
        'rooms': [room_to_dict(r, include_join_code=(r.owner_id == caller)) for r in rooms]
    })


@rooms_bp.route('/room/<int:room_id>')
def get_room_details(room_id):
    room = get_room(room_id)
    return jsonify({'room': room_to_dict(room, include_join_code=_can_see_join_code(room))})


@rooms_bp.route('/rooms/create', methods=['POST'])
@login_required
def create_room():
    data = get_json_payload(request)
    name = require_string(data, 'name', max_length=150)
    visibility = require_choice(data, 'visibility', VISIBILITIES)
    theme = require_string(data, 'theme', max_length=50)
    music_url = optional_string(data, 'music_url', max_length=500)
    max_users = optional_int(data, 'max_users', minimum=1)

    room = Room(
        name=name.strip(),
        owner_id=current_user.id,
        visibility=visibility,
        join_code=generate_join_code() if visibility == 'private' else None,
        theme=theme,
        music_url=music_url or None,
        max_users=max_users,
        created_at=clock.now_ms()
    )
    db.session.add(room)
    db.session.commit()

    current_app.logger.info("[ROOM CREATE] User %s created %s room %s", current_user.id, visibility, room.id)
    return jsonify({'success': True, 'room_id': room.id, 'room': room_to_dict(room, include_join_code=True)})


@rooms_bp.route('/room/<int:room_id>/update', methods=['POST'])
@login_required
def update_room(room_id):
    # Owner-only partial update; an explicit null clears music_url / max_users
    room = get_room(room_id)
    _require_owner(room)
    data = get_json_payload(request)
    if not data:
        raise ValidationError('Nothing to update')

    if 'name' in data:
        room.name = require_string(data, 'name', max_length=150).strip()
    if 'theme' in data:
        room.theme = require_string(data, 'theme', max_length=50)
    if 'music_url' in data:
        room.music_url = optional_string(data, 'music_url', max_length=500) or None
    if 'max_users' in data:
        room.max_users = optional_int(data, 'max_users', minimum=1)
    if 'visibility' in data:
        _apply_visibility(room, require_choice(data, 'visibility', VISIBILITIES))

    db.session.commit()
    notify_room(room.id, 'room')
    return jsonify({'success': True, 'room': room_to_dict(room, include_join_code=True)})


@rooms_bp.route('/room/<int:room_id>/delete', methods=['POST'])
@login_required
def delete_room(room_id):
    # Delete room together with its presence rows; the session log is kept
    room = get_room(room_id)
    _require_owner(room)

    Participant.query.filter_by(room_id=room_id).delete()
    CursorPosition.query.filter_by(room_id=room_id).delete()
    ChatMessage.query.filter_by(room_id=room_id).delete()
    db.session.delete(room)
    db.session.commit()

    current_app.logger.info("[ROOM DELETE] User %s deleted room %s", current_user.id, room_id)
    notify_room(room_id, 'room')
    return jsonify({'success': True})
