# Session log and leaderboard routes

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from focusroom.errors import ValidationError
from focusroom.extensions import db
from focusroom.functions import clock, aggregate_sessions, period_start_ms, PERIODS
from focusroom.functions.timing import TIMER_TYPES
from focusroom.functions.validation import (
    get_json_payload, require_string, require_int, require_choice
)
from focusroom.models import PomodoroSession
from focusroom.routes.common import get_own_participant
from focusroom.sockets import notify_room

stats_bp = Blueprint('stats', __name__)


@stats_bp.route('/room/<int:room_id>/sessions', methods=['POST'])
@login_required
def save_pomodoro_session(room_id):
    # Append a completed (or stopped early) timer run to the log
    data = get_json_payload(request)
    timer_type = require_choice(data, 'timer_type', TIMER_TYPES)
    duration = require_int(data, 'duration', minimum=0)
    task = require_string(data, 'task', allow_empty=True, max_length=500)

    # Display fields are copied from the caller's presence row
    participant = get_own_participant(room_id)
    session = PomodoroSession(
        room_id=room_id,
        user_id=current_user.id,
        user_name=participant.user_name,
        user_initial=participant.user_initial,
        user_avatar_url=participant.user_avatar_url,
        timer_type=timer_type,
        duration=duration,
        task=task,
        completed_at=clock.now_ms()
    )
    db.session.add(session)
    db.session.commit()

    current_app.logger.info("[SESSION] User %s logged %ss of %s in room %s",
                            current_user.id, duration, timer_type, room_id)
    notify_room(room_id, 'sessions')
    return jsonify({'success': True, 'session_id': session.id})


@stats_bp.route('/room/<int:room_id>/sessions/mine')
@login_required
def get_user_sessions(room_id):
    sessions = PomodoroSession.query.filter_by(
        room_id=room_id,
        user_id=current_user.id
    ).order_by(PomodoroSession.completed_at.desc(), PomodoroSession.id.desc()).all()
    return jsonify({'sessions': [s.to_dict() for s in sessions]})


@stats_bp.route('/room/<int:room_id>/leaderboard')
def get_leaderboard(room_id):
    sessions = PomodoroSession.query.filter_by(room_id=room_id).all()
    return jsonify({'leaderboard': aggregate_sessions(sessions)})


@stats_bp.route('/leaderboard')
def get_global_leaderboard():
    period = request.args.get('period', 'lifetime')
    if period not in PERIODS:
        raise ValidationError(f"'period' must be one of: {', '.join(PERIODS)}")

    start = period_start_ms(period, clock.local_now())
    sessions = PomodoroSession.query.filter(PomodoroSession.completed_at >= start).all()
    return jsonify({'period': period, 'since': start, 'leaderboard': aggregate_sessions(sessions)})
