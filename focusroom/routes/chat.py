# Spatial chat routes: live cursors and cursor-anchored messages

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from focusroom.errors import ValidationError
from focusroom.extensions import db
from focusroom.functions import clock, filter_active
from focusroom.functions.validation import (
    get_json_payload, require_string, optional_string, require_number
)
from focusroom.models import CursorPosition, ChatMessage
from focusroom.routes.common import get_room, get_own_participant
from focusroom.sockets import notify_room

chat_bp = Blueprint('chat', __name__)


@chat_bp.route('/room/<int:room_id>/cursor', methods=['POST'])
@login_required
def update_cursor_position(room_id):
    # Upsert the caller's cursor; omitting typing_text clears the preview
    data = get_json_payload(request)
    cursor_x = require_number(data, 'cursor_x')
    cursor_y = require_number(data, 'cursor_y')
    typing_text = optional_string(data, 'typing_text',
                                  max_length=current_app.config['CHAT_MESSAGE_MAX_LENGTH'])

    get_room(room_id)
    now = clock.now_ms()

    cursor = CursorPosition.query.filter_by(room_id=room_id, user_id=current_user.id).first()
    if not cursor:
        cursor = CursorPosition(room_id=room_id, user_id=current_user.id)
        db.session.add(cursor)
    cursor.user_name = current_user.name
    cursor.user_initial = current_user.initial
    cursor.user_avatar_url = current_user.avatar_url
    cursor.cursor_x = cursor_x
    cursor.cursor_y = cursor_y
    cursor.typing_text = typing_text or None
    cursor.last_seen = now
    db.session.commit()

    notify_room(room_id, 'cursors')
    return jsonify({'success': True})


@chat_bp.route('/room/<int:room_id>/cursors')
def get_cursor_positions(room_id):
    rows = CursorPosition.query.filter_by(room_id=room_id).order_by(CursorPosition.id).all()
    active = filter_active(rows, current_app.config['CURSOR_LIVENESS_MS'], clock.now_ms())
    return jsonify({'cursors': [c.to_dict() for c in active]})


@chat_bp.route('/room/<int:room_id>/cursor/remove', methods=['POST'])
@login_required
def remove_cursor_position(room_id):
    cursor = CursorPosition.query.filter_by(room_id=room_id, user_id=current_user.id).first()
    if cursor:
        db.session.delete(cursor)
        db.session.commit()
        notify_room(room_id, 'cursors')
    return jsonify({'success': True})


@chat_bp.route('/room/<int:room_id>/chat', methods=['POST'])
@login_required
def send_chat_message(room_id):
    data = get_json_payload(request)
    message = require_string(data, 'message').strip()
    if len(message) > current_app.config['CHAT_MESSAGE_MAX_LENGTH']:
        raise ValidationError('Message is too long')
    cursor_x = require_number(data, 'cursor_x')
    cursor_y = require_number(data, 'cursor_y')

    # Only people present in the room can talk in it
    participant = get_own_participant(room_id)
    now = clock.now_ms()
    msg = ChatMessage(
        room_id=room_id,
        user_id=current_user.id,
        user_name=participant.user_name,
        user_initial=participant.user_initial,
        user_avatar_url=participant.user_avatar_url,
        message=message,
        cursor_x=cursor_x,
        cursor_y=cursor_y,
        created_at=now
    )
    participant.last_seen = now
    db.session.add(msg)
    db.session.commit()

    notify_room(room_id, 'chat')
    return jsonify({'success': True, 'message': msg.to_dict()})


@chat_bp.route('/room/<int:room_id>/chat')
def get_chat_messages(room_id):
    # Newest messages, handed back oldest first for display
    limit = current_app.config['CHAT_HISTORY_LIMIT']
    latest = ChatMessage.query.filter_by(room_id=room_id).order_by(
        ChatMessage.created_at.desc(), ChatMessage.id.desc()
    ).limit(limit).all()
    latest.reverse()
    return jsonify({'messages': [m.to_dict() for m in latest]})
