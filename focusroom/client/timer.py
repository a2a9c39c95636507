# Client-side Pomodoro timer state machine
#
# The machine owns the locally perceived countdown for one participant in one
# room and never talks to the server itself. Every transition returns the
# writes to send (TimerWrite, SessionWrite); the server copy comes back in
# through reconcile() or adopt_newer(). focusroom.client.session does the I/O.
#
# Control actions (start, pause, resume, stop, reset, type change and the
# automatic advance after a completed timer) bump the version. Per-second
# ticks reuse it, so the server can reject ticks from a tab whose timer was
# superseded by a newer action elsewhere.

import time
from collections import namedtuple

from focusroom.functions.timing import (
    TIMER_TYPES, nominal_duration, next_break_type
)

# Seconds during which a local control action wins over server state
CONTROL_GUARD_SECONDS = 1.0

TimerWrite = namedtuple(
    'TimerWrite',
    ['timer_state', 'timer_type', 'time_left', 'pomodoro_count', 'timer_version']
)
SessionWrite = namedtuple('SessionWrite', ['timer_type', 'duration', 'task'])


class TimerTypeLocked(Exception):
    # Timer type changes are only allowed while idle

    def __init__(self, message='Stop the timer before changing its type'):
        super().__init__(message)


class ControlGuard:
    # Short "I am in control" window opened by every user action

    def __init__(self, window=CONTROL_GUARD_SECONDS, clock=time.monotonic):
        self.window = window
        self._clock = clock
        self._until = None

    def engage(self):
        self._until = self._clock() + self.window

    def release(self):
        self._until = None

    @property
    def active(self):
        return self._until is not None and self._clock() < self._until


class TimerMachine:
    # States are idle, running and paused. The timer type (pomodoro,
    # shortBreak, longBreak) is orthogonal and only changes while idle.

    def __init__(self, guard_window=CONTROL_GUARD_SECONDS, clock=time.monotonic):
        self.guard = ControlGuard(guard_window, clock)
        self.forget()

    def forget(self):
        # Blank timer; the next reconcile adopts the server copy wholesale
        self.state = 'idle'
        self.timer_type = 'pomodoro'
        self.time_left = nominal_duration('pomodoro')
        self.initial_time = self.time_left
        self.pomodoro_count = 0
        self.task = ''
        self.version = 0
        # Highest version seen from the server, control actions go past it
        self.known_version = 0
        self.initialized = False
        self.guard.release()

    def snapshot(self):
        return {
            'timer_state': self.state,
            'timer_type': self.timer_type,
            'time_left': self.time_left,
            'initial_time': self.initial_time,
            'pomodoro_count': self.pomodoro_count,
            'task': self.task,
            'timer_version': self.version,
        }

    # -- helpers ---------------------------------------------------------

    def _bump(self):
        self.version = max(self.version, self.known_version) + 1
        return self.version

    def _write(self, include_count=False):
        return TimerWrite(
            timer_state=self.state,
            timer_type=self.timer_type,
            time_left=self.time_left,
            pomodoro_count=self.pomodoro_count if include_count else None,
            timer_version=self.version
        )

    def _rewind(self):
        self.time_left = nominal_duration(self.timer_type)
        self.initial_time = self.time_left

    # -- user actions ----------------------------------------------------

    def start(self):
        if self.state != 'idle':
            return []
        self.guard.engage()
        if self.time_left == 0:
            self.time_left = nominal_duration(self.timer_type)
        self.initial_time = self.time_left
        self.state = 'running'
        self._bump()
        return [self._write()]

    def pause(self):
        if self.state != 'running':
            return []
        self.guard.engage()
        self.state = 'paused'
        self._bump()
        return [self._write()]

    def resume(self):
        if self.state != 'paused':
            return []
        self.guard.engage()
        self.state = 'running'
        self._bump()
        return [self._write()]

    def stop(self):
        # Back to idle; time spent in a running timer is logged as partial credit
        if self.state == 'idle':
            return []
        self.guard.engage()
        writes = []
        completed = self.initial_time - self.time_left
        if self.state == 'running' and completed > 0:
            writes.append(SessionWrite(self.timer_type, completed, self.task))
        self.state = 'idle'
        self._rewind()
        self._bump()
        writes.append(self._write())
        return writes

    def reset(self):
        # Like stop, but the elapsed time is discarded
        if self.state == 'idle':
            return []
        self.guard.engage()
        self.state = 'idle'
        self._rewind()
        self._bump()
        return [self._write()]

    def change_type(self, timer_type):
        if timer_type not in TIMER_TYPES:
            raise ValueError(f"unknown timer type: {timer_type}")
        if self.state != 'idle':
            raise TimerTypeLocked()
        self.guard.engage()
        self.timer_type = timer_type
        self._rewind()
        self._bump()
        return [self._write()]

    # -- clock -----------------------------------------------------------

    def tick(self):
        # One second off a running timer
        if self.state != 'running':
            return []
        self.time_left = max(0, self.time_left - 1)
        if self.time_left > 0:
            return [self._write()]
        return self._complete()

    def _complete(self):
        # A timer that runs out is always credited with its full nominal length
        self.guard.engage()
        finished = self.timer_type
        writes = [SessionWrite(finished, nominal_duration(finished), self.task)]

        if finished == 'pomodoro':
            self.pomodoro_count += 1
            self.timer_type = next_break_type(self.pomodoro_count)
            self.state = 'running'
        else:
            # Breaks start on their own, focus blocks wait for the user
            self.timer_type = 'pomodoro'
            self.state = 'idle'
        self._rewind()
        self._bump()
        writes.append(self._write(include_count=True))
        return writes

    # -- server state ----------------------------------------------------

    def adopt(self, server):
        # Take the server timer wholesale
        self.state = server['timer_state']
        self.timer_type = server.get('timer_type') or 'pomodoro'
        self.time_left = server['time_left']
        self.initial_time = nominal_duration(self.timer_type)
        self.pomodoro_count = server.get('pomodoro_count') or 0
        self.version = server.get('timer_version') or 0
        self.known_version = max(self.known_version, self.version)

    def adopt_newer(self, server):
        # Reply to a rejected write. Only a server copy at least as new as our
        # own version replaces local state; a newer local action still in
        # flight keeps it. Returns True when the server copy was taken.
        server_version = server.get('timer_version') or 0
        self.known_version = max(self.known_version, server_version)
        if server_version < self.version:
            return False
        self.adopt(server)
        return True

    def reconcile(self, server, typing=False):
        # Merge a freshly read participant row into local state; returns True
        # when the timer state or time left was replaced.
        self.known_version = max(self.known_version, server.get('timer_version') or 0)

        if not self.initialized:
            self.adopt(server)
            self.task = server.get('task') or ''
            self.initialized = True
            return True

        # A locally running timer, or one the user just touched, keeps its own
        # state, type and cycle position
        replaced = False
        if self.state != 'running' and not self.guard.active:
            server_type = server.get('timer_type') or 'pomodoro'
            if server_type != self.timer_type:
                self.timer_type = server_type
                self.initial_time = nominal_duration(server_type)
            self.pomodoro_count = server.get('pomodoro_count') or 0

            if server['timer_state'] != self.state:
                self.state = server['timer_state']
                self.time_left = server['time_left']
                self.version = max(self.version, server.get('timer_version') or 0)
                replaced = True

        server_task = server.get('task') or ''
        if not typing and server_task != self.task:
            self.task = server_task
        return replaced
