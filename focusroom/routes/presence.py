# Presence routes: join/heartbeat, leave, participant listing, position, timer, task

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import IntegrityError
from focusroom.errors import RoomFull, InvalidJoinCode, StaleTimerWrite
from focusroom.extensions import db
from focusroom.functions import clock, filter_active, count_active, join_code_matches
from focusroom.functions.timing import TIMER_STATES, TIMER_TYPES, TIMER_DURATIONS
from focusroom.functions.validation import (
    get_json_payload, require_string, optional_string, require_number,
    require_int, optional_int, require_choice, optional_choice
)
from focusroom.models import Participant
from focusroom.routes.common import get_room, find_participant, get_own_participant
from focusroom.sockets import notify_room

presence_bp = Blueprint('presence', __name__)


def _liveness_window():
    return current_app.config['PARTICIPANT_LIVENESS_MS']


def _refresh_identity(participant, user_name, user_initial, user_avatar_url, now):
    # Heartbeat: bump last_seen and the cached identity
    participant.last_seen = now
    participant.user_name = user_name
    participant.user_initial = user_initial
    if user_avatar_url:
        participant.user_avatar_url = user_avatar_url


@presence_bp.route('/room/<int:room_id>/join', methods=['POST'])
@login_required
def join(room_id):
    # Join a room, or refresh presence when the caller is already in it.
    # Capacity and join code are only checked for the first join.
    data = get_json_payload(request)
    join_code = optional_string(data, 'join_code', max_length=64)
    user_name = require_string(data, 'user_name', max_length=150)
    user_initial = require_string(data, 'user_initial', max_length=4)
    user_avatar_url = optional_string(data, 'user_avatar_url', max_length=500)

    room = get_room(room_id)
    now = clock.now_ms()

    participant = find_participant(room_id)
    if participant:
        _refresh_identity(participant, user_name, user_initial, user_avatar_url, now)
        db.session.commit()
        current_app.logger.debug("[JOIN] Heartbeat from user %s in room %s", current_user.id, room_id)
        notify_room(room_id, 'participants')
        return jsonify({'success': True, 'room_id': room_id, 'rejoined': True,
                        'participant': participant.to_dict()})

    if room.max_users:
        others = Participant.query.filter_by(room_id=room_id).all()
        active_count = count_active(others, _liveness_window(), now)
        if active_count >= room.max_users:
            current_app.logger.info("[JOIN] Room %s full (%s/%s), user %s refused",
                                    room_id, active_count, room.max_users, current_user.id)
            raise RoomFull()

    if room.visibility == 'private' and not join_code_matches(room, join_code):
        current_app.logger.info("[JOIN] Bad join code from user %s for room %s", current_user.id, room_id)
        raise InvalidJoinCode()

    participant = Participant(
        room_id=room_id,
        user_id=current_user.id,
        user_name=user_name,
        user_initial=user_initial,
        user_avatar_url=user_avatar_url,
        position_x=50,
        position_y=50,
        timer_state='idle',
        timer_type='pomodoro',
        time_left=TIMER_DURATIONS['pomodoro'],
        task='',
        pomodoro_count=0,
        timer_version=0,
        last_seen=now
    )
    db.session.add(participant)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request from the same user inserted the row first
        db.session.rollback()
        participant = find_participant(room_id)
        if not participant:
            raise
        _refresh_identity(participant, user_name, user_initial, user_avatar_url, now)
        db.session.commit()
        notify_room(room_id, 'participants')
        return jsonify({'success': True, 'room_id': room_id, 'rejoined': True,
                        'participant': participant.to_dict()})

    current_app.logger.info("[JOIN] User %s joined room %s", current_user.id, room_id)
    notify_room(room_id, 'participants')
    return jsonify({'success': True, 'room_id': room_id, 'rejoined': False,
                    'participant': participant.to_dict()})


@presence_bp.route('/room/<int:room_id>/leave', methods=['POST'])
@login_required
def leave_room(room_id):
    # Leaving twice, or a room never joined, still succeeds
    participant = find_participant(room_id)
    if participant:
        db.session.delete(participant)
        db.session.commit()
        current_app.logger.info("[LEAVE] User %s left room %s", current_user.id, room_id)
        notify_room(room_id, 'participants')
    return jsonify({'success': True})


@presence_bp.route('/room/<int:room_id>/participants')
def get_participants(room_id):
    rows = Participant.query.filter_by(room_id=room_id).order_by(Participant.id).all()
    active = filter_active(rows, _liveness_window(), clock.now_ms())
    return jsonify({'participants': [p.to_dict() for p in active]})


@presence_bp.route('/room/<int:room_id>/position', methods=['POST'])
@login_required
def update_position(room_id):
    # Clients clamp to the visible area; the server stores what it is given
    data = get_json_payload(request)
    x = require_number(data, 'x')
    y = require_number(data, 'y')

    participant = get_own_participant(room_id)
    participant.position_x = x
    participant.position_y = y
    participant.last_seen = clock.now_ms()
    db.session.commit()

    notify_room(room_id, 'participants')
    return jsonify({'success': True})


@presence_bp.route('/room/<int:room_id>/timer', methods=['POST'])
@login_required
def update_timer(room_id):
    # Patch the caller's authoritative timer.
    #
    # timer_version is optional. When given it must not be older than the
    # stored one, so a tab still ticking an outdated timer cannot overwrite a
    # newer start/pause/stop made elsewhere. Version-less writes always apply.
    data = get_json_payload(request)
    timer_state = require_choice(data, 'timer_state', TIMER_STATES)
    timer_type = optional_choice(data, 'timer_type', TIMER_TYPES)
    time_left = require_int(data, 'time_left', minimum=0)
    pomodoro_count = optional_int(data, 'pomodoro_count', minimum=0)
    timer_version = optional_int(data, 'timer_version', minimum=0)

    participant = get_own_participant(room_id)

    if timer_version is not None:
        stored_version = participant.timer_version or 0
        if timer_version < stored_version:
            current_app.logger.info("[TIMER] Stale write from user %s in room %s (v%s < v%s)",
                                    current_user.id, room_id, timer_version, stored_version)
            raise StaleTimerWrite(payload={'timer': participant.timer_dict()})
        participant.timer_version = timer_version

    participant.timer_state = timer_state
    participant.time_left = time_left
    if timer_type is not None:
        participant.timer_type = timer_type
    if pomodoro_count is not None:
        participant.pomodoro_count = pomodoro_count
    participant.last_seen = clock.now_ms()
    db.session.commit()

    notify_room(room_id, 'participants')
    return jsonify({'success': True, 'timer': participant.timer_dict()})


@presence_bp.route('/room/<int:room_id>/task', methods=['POST'])
@login_required
def update_task(room_id):
    data = get_json_payload(request)
    task = require_string(data, 'task', allow_empty=True, max_length=500)

    participant = get_own_participant(room_id)
    participant.task = task
    participant.last_seen = clock.now_ms()
    db.session.commit()

    notify_room(room_id, 'participants')
    return jsonify({'success': True})
