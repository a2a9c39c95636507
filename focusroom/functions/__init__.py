# Functions package

from focusroom.functions.liveness import is_active, filter_active, count_active
from focusroom.functions.join_codes import generate_join_code, join_code_matches
from focusroom.functions.leaderboard import aggregate_sessions, period_start_ms, PERIODS

__all__ = [
    'is_active', 'filter_active', 'count_active',
    'generate_join_code', 'join_code_matches',
    'aggregate_sessions', 'period_start_ms', 'PERIODS'
]
