# Identity session routes
#
# Accounts live in the external identity provider. Its backend (or a trusted
# proxy) posts the signed-in user's subject here together with the shared
# secret; we mirror the display fields and open a Flask-Login session.

import hmac

from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from focusroom.errors import NotAuthenticated
from focusroom.extensions import db
from focusroom.functions import clock
from focusroom.functions.validation import get_json_payload, require_string, optional_string
from focusroom.models import User

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


def _secret_ok(supplied):
    expected = current_app.config.get('IDENTITY_SHARED_SECRET') or ''
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode('utf-8'), expected.encode('utf-8'))


def _initial_for(name):
    return (name.strip()[:1] or 'U').upper()


def _user_dict(user):
    return {
        'id': user.id,
        'name': user.name,
        'initial': user.initial,
        'avatar_url': user.avatar_url,
    }


@auth_bp.route('/session', methods=['POST'])
def create_session():
    # Sign a user in on behalf of the identity provider
    if not _secret_ok(request.headers.get('X-Identity-Secret')):
        current_app.logger.warning("[AUTH] Rejected identity sync from %s", request.remote_addr)
        raise NotAuthenticated('Identity provider secret missing or wrong')

    data = get_json_payload(request)
    subject = require_string(data, 'subject', max_length=255)
    name = require_string(data, 'name', max_length=150)
    initial = optional_string(data, 'initial', max_length=4) or _initial_for(name)
    avatar_url = optional_string(data, 'avatar_url', max_length=500)

    user = db.session.get(User, subject)
    if user:
        user.name = name
        user.initial = initial
        if avatar_url:
            user.avatar_url = avatar_url
    else:
        user = User(id=subject, name=name, initial=initial, avatar_url=avatar_url)
        db.session.add(user)
    user.last_login_at = clock.now_ms()
    db.session.commit()

    login_user(user)
    current_app.logger.info("[AUTH] User %s signed in", user.id)
    return jsonify({'success': True, 'user': _user_dict(user)})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    current_app.logger.info("[AUTH] User %s signed out", current_user.id)
    logout_user()
    return jsonify({'success': True})


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'user': _user_dict(current_user)})
