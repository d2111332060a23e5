"""
rtest Watch Backend.

Per-directory file system monitoring using watchdog.
Requires Python 3.11+.
"""

import os
import queue
import sys
import time
from collections.abc import Callable, Iterator
from typing import Protocol

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileModifiedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from rtest.errors import WatchError, WatchRegistrationError
from rtest.utils.logger import LoggerMixin
from rtest.watcher.events import Op, RawEvent

_OPS = {
    EVENT_TYPE_CREATED: Op.CREATE,
    EVENT_TYPE_MODIFIED: Op.WRITE,
    EVENT_TYPE_DELETED: Op.REMOVE,
}

# Seconds between liveness checks of the observer while the queue is idle
_POLL_INTERVAL = 0.5

_CLOSED = object()


class FileAttribModifiedEvent(FileModifiedEvent):
    """A FileModifiedEvent caused by an attribute change alone (chmod, chown, touch)."""


def _make_observer() -> BaseObserver:
    """inotify observer that reports attribute changes separately where available."""
    if sys.platform.startswith("linux"):
        from rtest.watcher.inotify import AttribAwareInotifyEmitter

        return BaseObserver(AttribAwareInotifyEmitter)
    return Observer()


class WatchBackend(Protocol):
    """What the watch lifecycle needs from a watch mechanism."""

    def add(self, path: str) -> None: ...

    def events(self) -> Iterator[RawEvent]: ...

    def close(self) -> None: ...

    @property
    def watched(self) -> frozenset[str]: ...


class EventForwarder(FileSystemEventHandler):
    """
    Translates watchdog events into RawEvents on a queue.

    Runs on the observer thread; it only enqueues, never blocks on
    test runs.
    """

    def __init__(
        self,
        sink: "queue.Queue[object]",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__()
        self._sink = sink
        self._clock = clock

    def _emit(self, path: str | bytes, op: Op) -> None:
        self._sink.put(RawEvent(path=os.fsdecode(path), op=op, timestamp=self._clock()))

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Forward create/write/remove/rename/chmod, drop everything else."""
        if event.event_type == EVENT_TYPE_MOVED:
            self._emit(event.src_path, Op.RENAME)
            self._emit(event.dest_path, Op.CREATE)
            return

        # Synthesized by watchdog for the parent of any change
        if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
            return

        if isinstance(event, FileAttribModifiedEvent):
            self._emit(event.src_path, Op.CHMOD)
            return

        op = _OPS.get(event.event_type)
        if op is not None:
            self._emit(event.src_path, op)


class WatchdogBackend(LoggerMixin):
    """
    Watches an explicit set of directories, one non-recursive watch each.

    The set of watched paths only grows. A directory that is removed
    keeps its entry; watchdog stops the emitter on its own, and adding
    the same path again later replaces the dead watch.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._queue: queue.Queue[object] = queue.Queue()
        self._handler = EventForwarder(self._queue, clock)
        self._watches: dict[str, ObservedWatch] = {}
        self._closed = False

        self._observer = _make_observer()
        self._observer.start()

    def add(self, path: str) -> None:
        """
        Start watching a single directory.

        Raises:
            WatchRegistrationError: if the path is not a directory or the
                observer refuses it
        """
        path = os.path.abspath(path)
        if not os.path.isdir(path):
            raise WatchRegistrationError(path, "not a directory")

        previous = self._watches.get(path)
        if previous is not None:
            self._observer.unschedule(previous)

        try:
            watch = self._observer.schedule(self._handler, path, recursive=False)
        except OSError as exc:
            raise WatchRegistrationError(path, exc.strerror or str(exc)) from exc

        self._watches[path] = watch
        self.log.debug("adding_watch", path=path)

    def events(self) -> Iterator[RawEvent]:
        """
        Yield notifications in arrival order until the backend is closed.

        Raises:
            WatchError: if the observer thread dies while still open
        """
        while True:
            try:
                item = self._queue.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                if self._closed:
                    return
                if not self._observer.is_alive():
                    raise WatchError("watch observer stopped unexpectedly")
                continue

            if item is _CLOSED:
                return
            yield item

    def close(self) -> None:
        """Stop the observer and release all watches."""
        if self._closed:
            return
        self._closed = True

        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._queue.put(_CLOSED)
        self.log.debug("watch_backend_closed", watches=len(self._watches))

    @property
    def watched(self) -> frozenset[str]:
        return frozenset(self._watches)

    def __enter__(self) -> "WatchdogBackend":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
