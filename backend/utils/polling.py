"""
Bounded polling utility.

Used by the shutdown sequence to observe container state until a condition
holds or a deadline passes. The clock and sleep functions are injectable so
tests can run the loop without real waiting.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


def poll_until(
    predicate: Callable[[], bool],
    timeout: float,
    interval: float = 1.0,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Evaluate predicate until it returns True or timeout elapses.

    The predicate is always evaluated at least once, even with a zero timeout.
    Exceptions raised by the predicate propagate to the caller.

    Args:
        predicate: Observation to repeat; True ends the wait
        timeout: Maximum seconds to wait
        interval: Seconds to sleep between observations
        clock: Monotonic time source
        sleep: Sleep function

    Returns:
        True if the predicate held before the deadline, False on timeout

    Examples:
        >>> poll_until(lambda: True, timeout=5)
        True
    """
    deadline = clock() + timeout

    while True:
        if predicate():
            return True

        remaining = deadline - clock()
        if remaining <= 0:
            logger.debug(f"Polling gave up after {timeout}s")
            return False

        sleep(min(interval, remaining))
