"""
rtest Testing Helpers.

In-memory collaborators for exercising the watch lifecycle without
real file system notifications or test processes.
Requires Python 3.11+.
"""

import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from rtest.errors import WatchRegistrationError
from rtest.runner.invoker import TestInvoker
from rtest.watcher.events import Op, RawEvent


class FakeClock:
    """Manually advanced monotonic clock in nanoseconds."""

    def __init__(self, start: int = 1_000_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms * 1_000_000


class FakeBackend:
    """Watch backend fed from a list, recording every watched path."""

    def __init__(
        self,
        events: Iterable[RawEvent] = (),
        refuse: Iterable[str] = (),
    ) -> None:
        self._pending = list(events)
        self._watched: set[str] = set()
        self._refuse = {os.path.abspath(p) for p in refuse}
        self.closed = False
        # Watch set as it was just before each event was handed out
        self.watched_at_event: list[frozenset[str]] = []

    def add(self, path: str) -> None:
        path = os.path.abspath(path)
        if path in self._refuse:
            raise WatchRegistrationError(path, "refused")
        self._watched.add(path)

    def push(self, *events: RawEvent) -> None:
        self._pending.extend(events)

    def events(self) -> Iterator[RawEvent]:
        while self._pending:
            self.watched_at_event.append(frozenset(self._watched))
            yield self._pending.pop(0)

    def close(self) -> None:
        self.closed = True

    @property
    def watched(self) -> frozenset[str]:
        return frozenset(self._watched)


class RecordingInvoker(TestInvoker):
    """Invoker that records runs instead of spawning processes."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.runs: list[tuple[str, list[str]]] = []

    def run_for_dir(self, directory: str) -> int:
        self.runs.append((directory, self.argv))
        return 0


def make_event(path: Path | str, op: Op, timestamp: float = 0.0) -> RawEvent:
    """Build a RawEvent from a path-like."""
    return RawEvent(path=str(path), op=op, timestamp=timestamp)
