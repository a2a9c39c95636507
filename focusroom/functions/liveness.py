# Read-time presence policy
#
# Nothing in the store carries an "active" flag. A row counts as present while
# its last_seen is strictly younger than the window; stale rows stay in the
# table until their owner leaves or re-joins.


def _last_seen(record):
    if isinstance(record, dict):
        return record['last_seen']
    return record.last_seen


def is_active(last_seen, window_ms, now_ms):
    return now_ms - last_seen < window_ms


def filter_active(records, window_ms, now_ms):
    # Keeps input order; equality with the window is stale
    return [r for r in records if is_active(_last_seen(r), window_ms, now_ms)]


def count_active(records, window_ms, now_ms):
    return len(filter_active(records, window_ms, now_ms))
