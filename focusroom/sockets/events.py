# Socket.IO event handlers
#
# Clients subscribe to a room's channel and re-run the matching query whenever
# a 'room_changed' notification names a topic they display. The payload never
# carries state, the HTTP queries remain the single read path.

from flask import current_app
from flask_socketio import join_room, leave_room, emit
from focusroom.extensions import socketio

TOPICS = ('room', 'participants', 'cursors', 'chat', 'sessions')


def channel_name(room_id):
    return f"room_{room_id}"


def _room_id_from(data):
    try:
        return int((data or {}).get('room_id'))
    except (TypeError, ValueError):
        return None


@socketio.on('subscribe')
def on_subscribe(data):
    # Start receiving change notifications for a room
    room_id = _room_id_from(data)
    if room_id is None:
        emit('error', {'error': 'room_id required', 'code': 'ValidationError'})
        return
    join_room(channel_name(room_id))
    current_app.logger.debug("[SOCKET SUBSCRIBE] room %s", room_id)
    emit('subscribed', {'room_id': room_id})


@socketio.on('unsubscribe')
def on_unsubscribe(data):
    room_id = _room_id_from(data)
    if room_id is None:
        return
    leave_room(channel_name(room_id))
    current_app.logger.debug("[SOCKET UNSUBSCRIBE] room %s", room_id)


def notify_room(room_id, topic):
    # Tell subscribers that a query result for this room may have changed
    try:
        socketio.emit('room_changed', {'room_id': room_id, 'topic': topic}, to=channel_name(room_id))
    except Exception as e:
        # The write is already committed; a missed notice only delays the next re-query
        current_app.logger.warning("[SOCKET NOTIFY] room %s topic %s failed: %s", room_id, topic, e)
