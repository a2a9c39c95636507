# Session log aggregation for room and global leaderboards

PERIODS = ('today', 'thisMonth', 'lifetime')


def period_start(period, now):
    # First instant (local time) counted by a leaderboard period
    if period == 'today':
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == 'thisMonth':
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if period == 'lifetime':
        return None
    raise ValueError(f"unknown period: {period}")


def period_start_ms(period, now):
    start = period_start(period, now)
    if start is None:
        return 0
    return int(start.timestamp() * 1000)


def _session_fields(session):
    if isinstance(session, dict):
        return session
    return session.to_dict()


def aggregate_sessions(sessions):
    # Group sessions per user and rank by total focused time.
    #
    # Sessions are folded in completion order so that the cached display
    # fields kept for a user come from their most recent session that has
    # them. Ties on total_time keep the order in which users first completed
    # a session.
    rows = sorted(
        (_session_fields(s) for s in sessions),
        key=lambda s: (s['completed_at'], s.get('id') or 0)
    )

    entries = {}
    for s in rows:
        entry = entries.get(s['user_id'])
        if entry is None:
            entry = {
                'user_id': s['user_id'],
                'user_name': s['user_name'],
                'user_initial': s.get('user_initial') or '',
                'user_avatar_url': s.get('user_avatar_url'),
                'total_time': 0,
                'total_sessions': 0,
                'last_completed_at': s['completed_at'],
            }
            entries[s['user_id']] = entry

        entry['total_time'] += s['duration']
        entry['total_sessions'] += 1
        entry['last_completed_at'] = s['completed_at']
        if s.get('user_name'):
            entry['user_name'] = s['user_name']
        if s.get('user_initial'):
            entry['user_initial'] = s['user_initial']
        if s.get('user_avatar_url'):
            entry['user_avatar_url'] = s['user_avatar_url']

    ranked = sorted(entries.values(), key=lambda e: e['total_time'], reverse=True)
    for position, entry in enumerate(ranked, start=1):
        entry['rank'] = position
    return ranked
