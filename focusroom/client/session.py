# Client session for one joined room
#
# Drives a TimerMachine: runs the one-second tick loop, sends the machine's
# writes without blocking the countdown, debounces task edits, buffers avatar
# drags until release and re-reads participants whenever the server announces
# a change. Background writes are best effort: failures are logged and the
# local timer keeps going.

import logging
import queue
import threading

import socketio

from focusroom.client.timer import TimerMachine, TimerWrite, SessionWrite
from focusroom.errors import StaleTimerWrite
from focusroom.functions.timing import format_time

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0
TASK_DEBOUNCE_SECONDS = 0.5
# Avatars are kept inside the visible part of the room
POSITION_MIN = 5
POSITION_MAX = 95


def clamp_position(value):
    return max(POSITION_MIN, min(POSITION_MAX, value))


def _spawn(fn, *args):
    worker = threading.Thread(target=fn, args=args, daemon=True)
    worker.start()
    return worker


class SerialDispatcher:
    # Runs submitted calls one at a time, in submission order, on a single
    # worker thread, so writes reach the server in the order they were made

    def __init__(self):
        self._queue = queue.Queue()
        self._worker = None
        self._lock = threading.Lock()

    def __call__(self, fn, *args):
        with self._lock:
            if self._worker is None:
                self._worker = _spawn(self._run)
        self._queue.put((fn, args))

    def _run(self):
        while True:
            fn, args = self._queue.get()
            try:
                fn(*args)
            except Exception as e:
                logger.warning("Background call %s failed: %s", getattr(fn, "__name__", fn), e)
            finally:
                self._queue.task_done()

    def join(self):
        # Block until everything submitted so far has run
        self._queue.join()


class RoomSession:

    def __init__(self, api, room_id, user_name, user_initial, user_avatar_url=None,
                 join_code=None, machine=None, dispatch=None,
                 tick_seconds=TICK_SECONDS, debounce_seconds=TASK_DEBOUNCE_SECONDS):
        self.api = api
        self.room_id = room_id
        self.user_name = user_name
        self.user_initial = user_initial
        self.user_avatar_url = user_avatar_url
        self.join_code = join_code
        self.machine = machine or TimerMachine()
        # dispatch(fn, *args) runs fn off the countdown path
        self.dispatch = dispatch or SerialDispatcher()
        self.tick_seconds = tick_seconds
        self.debounce_seconds = debounce_seconds

        self.joined = False
        self.participants = []
        self.typing_task = False
        self.local_position = None

        self._lock = threading.RLock()
        self._closed = threading.Event()
        self._loop = None
        self._task_timer = None
        self.realtime = None

    # --- lifecycle ---

    def join(self):
        # Errors here (RoomFull, InvalidJoinCode, ...) go straight to the caller
        result = self.api.join(
            self.room_id, self.user_name, self.user_initial,
            user_avatar_url=self.user_avatar_url, join_code=self.join_code
        )
        self.joined = True
        self._closed.clear()
        self.refresh()
        return result

    def heartbeat(self):
        # Presence refresh; same call as join, failures only logged
        try:
            self.api.join(
                self.room_id, self.user_name, self.user_initial,
                user_avatar_url=self.user_avatar_url, join_code=self.join_code
            )
        except Exception as e:
            logger.warning("Failed to refresh presence in room %s: %s", self.room_id, e)

    def leave(self):
        # Stop local work first, then make a best-effort delete of our row.
        # The local timer is dropped too: a later join starts from whatever
        # the server holds then.
        self._closed.set()
        with self._lock:
            was_joined, self.joined = self.joined, False
            self._stop_loop()
            if self._task_timer is not None:
                self._task_timer.cancel()
                self._task_timer = None
            self.machine.forget()
            self.typing_task = False
            self.local_position = None
        if self.realtime is not None:
            try:
                self.realtime.disconnect()
            except Exception as e:
                logger.warning("Socket disconnect failed: %s", e)
            self.realtime = None
        if was_joined:
            try:
                self.api.leave_room(self.room_id)
            except Exception as e:
                logger.warning("Failed to leave room %s: %s", self.room_id, e)

    # --- server state ---

    def own_participant(self):
        for p in self.participants:
            if p['user_id'] == self.api.user_id:
                return p
        return None

    def refresh(self):
        # Re-read participants and merge our own row into the timer
        self.participants = self.api.get_participants(self.room_id)
        mine = self.own_participant()
        if mine is None:
            return None
        with self._lock:
            self.machine.reconcile(mine, typing=self.typing_task)
            running = self.machine.state == 'running'
        if running:
            self.ensure_loop()
        return mine

    def connect_realtime(self, url, client=None):
        # Subscribe to change notifications for this room
        sio = client or socketio.Client(reconnection=True)

        @sio.on('room_changed')
        def _on_room_changed(data):
            if data.get('room_id') == self.room_id and data.get('topic') == 'participants':
                self.dispatch(self._refresh_quietly)

        @sio.on('connect')
        def _on_connect():
            sio.emit('subscribe', {'room_id': self.room_id})
            # Catch up on anything missed while disconnected
            self.dispatch(self._refresh_quietly)

        sio.connect(url, headers={'Cookie': self.api.cookie_header()})
        self.realtime = sio
        return sio

    def _refresh_quietly(self):
        try:
            self.refresh()
        except Exception as e:
            logger.warning("Failed to refresh room %s: %s", self.room_id, e)

    # --- timer controls ---

    def start(self):
        return self._control(self.machine.start)

    def pause(self):
        return self._control(self.machine.pause)

    def resume(self):
        return self._control(self.machine.resume)

    def stop(self):
        return self._control(self.machine.stop)

    def reset(self):
        return self._control(self.machine.reset)

    def change_type(self, timer_type):
        # TimerTypeLocked propagates so the caller can tell the user
        return self._control(self.machine.change_type, timer_type)

    def _control(self, action, *args):
        with self._lock:
            writes = action(*args)
            running = self.machine.state == 'running'
        self._send(writes)
        if running:
            self.ensure_loop()
        return writes

    def tick(self):
        with self._lock:
            writes = self.machine.tick()
        self._send(writes)
        return writes

    def ensure_loop(self):
        # self._loop holds the stop flag of the live loop, None when there is none
        with self._lock:
            if self._loop is not None:
                return
            stop = self._loop = threading.Event()
        _spawn(self.run_timer_loop, stop)

    def _stop_loop(self):
        with self._lock:
            if self._loop is not None:
                self._loop.set()
                self._loop = None

    def run_timer_loop(self, stop):
        # One tick per second while running; the state check and the exit
        # happen under the lock so a concurrent start() always gets a loop
        while not stop.wait(self.tick_seconds):
            with self._lock:
                if self._loop is not stop:
                    return
                if self.machine.state != 'running':
                    self._loop = None
                    return
            self.tick()

    # --- writes ---

    def _send(self, writes):
        if writes and self.joined:
            self.dispatch(self._write_all, list(writes))

    def _write_all(self, writes):
        for write in writes:
            if not self.joined:
                return
            try:
                self._write(write)
            except StaleTimerWrite as e:
                with self._lock:
                    adopted = self.machine.adopt_newer(e.payload['timer'])
                    running = self.machine.state == 'running'
                if not adopted:
                    # Our own newer action is already queued behind this write
                    logger.debug("Dropped outdated timer write in room %s", self.room_id)
                    continue
                # Another tab moved the timer on; its state wins
                logger.info("Timer in room %s superseded, adopting server state", self.room_id)
                if running:
                    self.ensure_loop()
                return
            except Exception as e:
                logger.warning("Background write %s failed in room %s: %s",
                               type(write).__name__, self.room_id, e)

    def _write(self, write):
        if isinstance(write, TimerWrite):
            self.api.update_timer(
                self.room_id, write.timer_state, write.time_left,
                timer_type=write.timer_type,
                pomodoro_count=write.pomodoro_count,
                timer_version=write.timer_version
            )
        elif isinstance(write, SessionWrite):
            self.api.save_pomodoro_session(self.room_id, write.timer_type, write.duration, write.task)
            logger.info("Logged %s of %s in room %s", format_time(write.duration), write.timer_type, self.room_id)

    # --- task ---

    def set_task(self, text):
        with self._lock:
            self.machine.task = text
            if self._task_timer is not None:
                self._task_timer.cancel()
                self._task_timer = None
            if not self.joined:
                self.typing_task = False
                return
            self.typing_task = True
            self._task_timer = threading.Timer(self.debounce_seconds, self.flush_task)
            self._task_timer.daemon = True
            self._task_timer.start()

    def flush_task(self):
        with self._lock:
            if self._task_timer is not None:
                self._task_timer.cancel()
                self._task_timer = None
            task = self.machine.task
        try:
            self.api.update_task(self.room_id, task)
        except Exception as e:
            logger.warning("Failed to save task in room %s: %s", self.room_id, e)
        finally:
            self.typing_task = False

    # --- avatar drag ---

    def begin_drag(self):
        mine = self.own_participant()
        if mine is not None:
            self.local_position = (mine['position_x'], mine['position_y'])
        else:
            self.local_position = (50, 50)

    def drag_to(self, x, y):
        # Local only; nothing is written until the drag ends
        if self.local_position is None:
            return None
        self.local_position = (clamp_position(x), clamp_position(y))
        return self.local_position

    def end_drag(self):
        position, self.local_position = self.local_position, None
        if position is None or not self.joined:
            return None
        try:
            self.api.update_position(self.room_id, position[0], position[1])
        except Exception as e:
            logger.warning("Failed to save position in room %s: %s", self.room_id, e)
        return position

    @property
    def closed(self):
        return self._closed.is_set()
