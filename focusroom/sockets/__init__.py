# Socket.IO handlers and change notifications

from focusroom.sockets.events import notify_room, channel_name

__all__ = ['notify_room', 'channel_name']
