# Timer vocabulary shared by the server routes and the client state machine

TIMER_STATES = ('idle', 'running', 'paused')
TIMER_TYPES = ('pomodoro', 'shortBreak', 'longBreak')

# Nominal durations in seconds
TIMER_DURATIONS = {
    'pomodoro': 25 * 60,
    'shortBreak': 5 * 60,
    'longBreak': 15 * 60,
}

# Every Nth completed pomodoro is followed by a long break
LONG_BREAK_EVERY = 4


def nominal_duration(timer_type):
    return TIMER_DURATIONS[timer_type or 'pomodoro']


def next_break_type(pomodoro_count):
    # pomodoro_count already includes the pomodoro that just finished
    return 'longBreak' if pomodoro_count % LONG_BREAK_EVERY == 0 else 'shortBreak'


def format_time(seconds):
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins:02d}:{secs:02d}"
