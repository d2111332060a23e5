"""
rtest Debouncer.

Suppresses duplicate file system notifications.
Requires Python 3.11+.
"""

import time
from collections import OrderedDict
from collections.abc import Callable

from rtest.utils.logger import LoggerMixin
from rtest.watcher.events import RawEvent

# Editors emit several notifications per logical save
THROTTLE_WINDOW_MS = 800


class ThrottleTable:
    """
    Last accepted timestamp per throttle key.

    Bounded: when more than ``max_entries`` keys are held, keys whose
    timestamp is already outside the window are swept. Keys inside the
    window are never dropped, so the table can briefly exceed the cap
    during a burst.
    """

    def __init__(self, window: int, max_entries: int = 4096) -> None:
        self._window = window
        self._max_entries = max_entries
        self._entries: OrderedDict[str, int] = OrderedDict()

    def get(self, key: str) -> int | None:
        return self._entries.get(key)

    def touch(self, key: str, now: int) -> None:
        """Record ``now`` as the last accepted time for ``key``."""
        self._entries[key] = now
        self._entries.move_to_end(key)
        if len(self._entries) > self._max_entries:
            self._sweep(now)

    def _sweep(self, now: int) -> None:
        # Entries are kept in acceptance order, so stale keys sit at the front
        while self._entries:
            key, last = next(iter(self._entries.items()))
            if now - last < self._window:
                break
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class Debouncer(LoggerMixin):
    """
    Drops a notification if the same (path, operation) pair was
    accepted less than 800ms earlier.

    A Write right after a Create on the same path is a different key
    and is therefore never suppressed by the Create.
    """

    def __init__(
        self,
        max_entries: int = 4096,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        """
        Initialize the debouncer.

        Args:
            max_entries: Throttle table size before stale keys are swept
            clock: Monotonic time source in nanoseconds
        """
        self._window = THROTTLE_WINDOW_MS * 1_000_000
        self._clock = clock
        self._table = ThrottleTable(self._window, max_entries)

    def accept(self, event: RawEvent) -> bool:
        """
        Decide whether an event should be dispatched.

        Returns:
            True if the event is new enough to act on
        """
        now = self._clock()
        key = event.throttle_key

        last = self._table.get(key)
        if last is not None and now - last < self._window:
            self.log.debug(
                "skipping_event",
                path=event.path,
                op=event.op.value,
                elapsed_ms=(now - last) // 1_000_000,
            )
            return False

        self._table.touch(key, now)
        return True

    @property
    def table(self) -> ThrottleTable:
        return self._table
