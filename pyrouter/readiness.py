"""
Waiting for asynchronous system state, such as a daemon switching an interface to AP mode
"""
import time
from collections import namedtuple

ReadinessResult = namedtuple('ReadinessResult', ['ready', 'attempts', 'elapsed'])

DEFAULT_TIMEOUT = 8.0
DEFAULT_INTERVAL = 1.0
DEFAULT_BACKOFF = 1.0
DEFAULT_MAX_INTERVAL = 5.0


def wait_until(check, timeout=DEFAULT_TIMEOUT, interval=DEFAULT_INTERVAL,
               backoff=DEFAULT_BACKOFF, max_interval=DEFAULT_MAX_INTERVAL,
               on_retry=None, sleep=None, clock=None):
    """
    Call check() until it returns True or the timeout runs out.

    The delay between attempts starts at interval and is multiplied by backoff
    after every failed attempt, capped at max_interval and at the time left.
    The cap never drops below the starting interval.
    on_retry(attempt, delay) is called before each sleep.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    if backoff < 1:
        raise ValueError("backoff must be at least 1")
    sleep = sleep or time.sleep
    clock = clock or time.monotonic

    start = clock()
    attempts = 0
    delay = interval
    cap = max(max_interval, interval)

    while True:
        attempts += 1
        if check():
            return ReadinessResult(True, attempts, clock() - start)

        remaining = timeout - (clock() - start)
        if remaining <= 0:
            return ReadinessResult(False, attempts, clock() - start)

        pause = min(delay, cap, remaining)
        if on_retry is not None:
            on_retry(attempts, pause)
        sleep(pause)
        delay *= backoff
