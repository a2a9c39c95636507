import pytest

from focusroom.client.timer import TimerMachine, TimerWrite, SessionWrite, TimerTypeLocked
from focusroom.functions.timing import format_time, next_break_type


class FakeMonotonic:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def mono():
    return FakeMonotonic()


@pytest.fixture
def machine(mono):
    return TimerMachine(clock=mono)


def _server(state='idle', timer_type='pomodoro', time_left=1500, count=0, version=0, task=''):
    return {
        'timer_state': state, 'timer_type': timer_type, 'time_left': time_left,
        'pomodoro_count': count, 'timer_version': version, 'task': task,
    }


def _run_out(machine):
    writes = []
    while True:
        out = machine.tick()
        writes.extend(out)
        if any(isinstance(w, SessionWrite) for w in out):
            return writes


def test_initial_state(machine):
    assert machine.snapshot() == {
        'timer_state': 'idle', 'timer_type': 'pomodoro', 'time_left': 1500,
        'initial_time': 1500, 'pomodoro_count': 0, 'task': '', 'timer_version': 0,
    }


def test_start_pause_resume(machine):
    [w] = machine.start()
    assert w == TimerWrite('running', 'pomodoro', 1500, None, 1)
    assert machine.start() == []

    [w] = machine.pause()
    assert w.timer_state == 'paused'
    assert machine.pause() == []

    [w] = machine.resume()
    assert w.timer_state == 'running'
    assert machine.version == 3


def test_ticks_count_down_without_bumping_version(machine):
    machine.start()
    [w] = machine.tick()
    assert w.time_left == 1499
    assert w.timer_version == 1
    assert machine.initial_time == 1500


def test_ticks_do_nothing_unless_running(machine):
    assert machine.tick() == []
    machine.start()
    machine.pause()
    assert machine.tick() == []
    assert machine.time_left == 1500


def test_stop_logs_partial_running_time(machine):
    machine.start()
    for _ in range(90):
        machine.tick()
    writes = machine.stop()
    assert writes[0] == SessionWrite('pomodoro', 90, '')
    assert writes[1].timer_state == 'idle'
    assert writes[1].time_left == 1500
    assert machine.state == 'idle'


def test_stop_from_pause_logs_nothing(machine):
    machine.start()
    machine.tick()
    machine.pause()
    writes = machine.stop()
    assert [type(w) for w in writes] == [TimerWrite]


def test_stop_right_after_start_logs_nothing(machine):
    machine.start()
    assert [type(w) for w in machine.stop()] == [TimerWrite]
    assert machine.stop() == []


def test_reset_discards_elapsed_time(machine):
    machine.start()
    machine.tick()
    [w] = machine.reset()
    assert w == TimerWrite('idle', 'pomodoro', 1500, None, 2)


def test_type_change_only_while_idle(machine):
    [w] = machine.change_type('longBreak')
    assert (w.timer_type, w.time_left) == ('longBreak', 900)
    machine.start()
    with pytest.raises(TimerTypeLocked):
        machine.change_type('pomodoro')
    machine.pause()
    with pytest.raises(TimerTypeLocked):
        machine.change_type('pomodoro')
    with pytest.raises(ValueError):
        TimerMachine().change_type('nap')


def test_pomodoro_completion_starts_break(machine):
    machine.start()
    writes = _run_out(machine)
    session, timer = writes[-2], writes[-1]
    assert session == SessionWrite('pomodoro', 1500, '')
    assert timer.timer_state == 'running'
    assert timer.timer_type == 'shortBreak'
    assert timer.time_left == 300
    assert timer.pomodoro_count == 1
    assert machine.initial_time == 300


def test_break_completion_returns_to_idle_pomodoro(machine):
    machine.change_type('shortBreak')
    machine.start()
    writes = _run_out(machine)
    assert writes[-2] == SessionWrite('shortBreak', 300, '')
    assert writes[-1].timer_state == 'idle'
    assert writes[-1].timer_type == 'pomodoro'
    assert writes[-1].time_left == 1500


def test_full_cycle_logs_nominal_durations(machine):
    # Four pomodoros with their breaks, all run out
    sessions = []
    machine.start()
    for _ in range(4):
        sessions.extend(w for w in _run_out(machine) if isinstance(w, SessionWrite))
        sessions.extend(w for w in _run_out(machine) if isinstance(w, SessionWrite))
        if machine.state == 'idle':
            machine.start()

    assert [(s.timer_type, s.duration) for s in sessions] == [
        ('pomodoro', 1500), ('shortBreak', 300),
        ('pomodoro', 1500), ('shortBreak', 300),
        ('pomodoro', 1500), ('shortBreak', 300),
        ('pomodoro', 1500), ('longBreak', 900),
    ]
    assert machine.pomodoro_count == 4


def test_next_break_type():
    assert [next_break_type(n) for n in (1, 2, 3, 4, 5, 8)] == [
        'shortBreak', 'shortBreak', 'shortBreak', 'longBreak', 'shortBreak', 'longBreak'
    ]


def test_format_time():
    assert format_time(1500) == '25:00'
    assert format_time(65) == '01:05'
    assert format_time(0) == '00:00'


def test_first_reconcile_adopts_server(machine):
    replaced = machine.reconcile(_server('paused', 'shortBreak', 120, count=3, version=7, task='Read'))
    assert replaced is True
    assert machine.state == 'paused'
    assert machine.timer_type == 'shortBreak'
    assert machine.time_left == 120
    assert machine.pomodoro_count == 3
    assert machine.version == 7
    assert machine.task == 'Read'


def test_running_timer_ignores_server_state(machine, mono):
    machine.reconcile(_server())
    machine.start()
    mono.now += 5
    assert machine.reconcile(_server('idle', 'longBreak', 900, count=2)) is False
    assert machine.state == 'running'
    assert machine.timer_type == 'pomodoro'
    assert machine.pomodoro_count == 0


def test_guard_window_protects_recent_actions(machine, mono):
    machine.reconcile(_server())
    machine.start()
    machine.pause()
    # A stale read still saying running arrives right after the pause
    assert machine.reconcile(_server('running', time_left=1490)) is False
    assert machine.state == 'paused'

    mono.now += 1.5
    assert machine.reconcile(_server('running', time_left=1490, version=9)) is True
    assert machine.state == 'running'
    assert machine.time_left == 1490
    assert machine.version == 9


def test_idle_machine_follows_other_tab(machine, mono):
    machine.reconcile(_server())
    mono.now += 5
    assert machine.reconcile(_server('running', 'longBreak', 800, count=4, version=3)) is True
    assert machine.state == 'running'
    assert machine.time_left == 800
    assert machine.timer_type == 'longBreak'
    assert machine.pomodoro_count == 4


def test_idle_machine_syncs_type_and_count(machine, mono):
    machine.reconcile(_server())
    mono.now += 5
    assert machine.reconcile(_server('idle', 'longBreak', 900, count=4)) is False
    assert machine.timer_type == 'longBreak'
    assert machine.initial_time == 900
    assert machine.pomodoro_count == 4


def test_task_not_overwritten_while_typing(machine):
    machine.reconcile(_server(task='Old'))
    machine.task = 'New draft'
    machine.reconcile(_server(task='Old'), typing=True)
    assert machine.task == 'New draft'
    machine.reconcile(_server(task='Saved'), typing=False)
    assert machine.task == 'Saved'


def test_control_actions_outrank_known_server_versions(machine, mono):
    machine.reconcile(_server())
    machine.start()
    mono.now += 5
    # Another tab has since written version 5
    machine.reconcile(_server('running', version=5))
    [w] = machine.pause()
    assert w.timer_version == 6


def test_adopt_replaces_everything(machine):
    machine.start()
    machine.adopt(_server('paused', 'pomodoro', 700, count=2, version=4))
    assert machine.snapshot()['timer_state'] == 'paused'
    assert machine.time_left == 700
    assert machine.version == 4
    assert machine.known_version == 4


def test_adopt_newer_keeps_local_actions_ahead_of_the_server(machine):
    machine.reconcile(_server())
    machine.start()
    machine.pause()
    machine.resume()

    # Rejection reply carrying the server's version 2 while we are at 3
    assert machine.adopt_newer(_server('paused', time_left=1499, version=2)) is False
    assert machine.state == 'running'
    assert machine.version == 3
    assert machine.known_version == 2


def test_adopt_newer_takes_a_newer_server_timer(machine):
    machine.reconcile(_server())
    machine.start()
    assert machine.adopt_newer(_server('idle', 'longBreak', 900, count=4, version=5)) is True
    assert (machine.state, machine.timer_type, machine.version) == ('idle', 'longBreak', 5)


def test_forget_returns_to_a_blank_uninitialized_timer(machine):
    machine.reconcile(_server(count=2, version=4, task='Essay'))
    machine.start()
    machine.forget()

    assert not machine.initialized
    assert not machine.guard.active
    assert machine.snapshot() == TimerMachine().snapshot()
    assert machine.reconcile(_server()) is True
    assert machine.version == 0
