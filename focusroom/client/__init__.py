# Client half of the room engine: HTTP API wrapper, timer state machine, session driver

from focusroom.client.api import RoomApi
from focusroom.client.timer import TimerMachine, TimerWrite, SessionWrite, TimerTypeLocked
from focusroom.client.session import RoomSession

__all__ = [
    'RoomApi',
    'TimerMachine', 'TimerWrite', 'SessionWrite', 'TimerTypeLocked',
    'RoomSession'
]
