# Wall-clock helpers; presence and session timestamps are epoch milliseconds

import time
from datetime import datetime


def now_ms():
    return int(time.time() * 1000)


def local_now():
    # Server-local time, used for calendar periods (midnight, month start)
    return datetime.now()
