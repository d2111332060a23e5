"""
rtest inotify Emitter.

Tells attribute-only changes apart from content writes on Linux.
Requires Python 3.11+.
"""

from watchdog.events import FileModifiedEvent, FileSystemEvent
from watchdog.observers.inotify import InotifyEmitter

from rtest.watcher.backend import FileAttribModifiedEvent


class _ReadTap:
    """Wraps an InotifyBuffer and remembers the last raw event read."""

    def __init__(self, buffer) -> None:
        self._buffer = buffer
        self.last = None

    def read_event(self):
        self.last = self._buffer.read_event()
        return self.last

    def close(self) -> None:
        self._buffer.close()


class AttribAwareInotifyEmitter(InotifyEmitter):
    """
    InotifyEmitter that reports IN_ATTRIB as FileAttribModifiedEvent.

    watchdog folds IN_ATTRIB and IN_MODIFY into the same FileModifiedEvent;
    the raw event that produced it is still available on the buffer.
    """

    def on_thread_start(self) -> None:
        super().on_thread_start()
        self._inotify = _ReadTap(self._inotify)

    def queue_event(self, event: FileSystemEvent) -> None:
        raw = self._inotify.last if isinstance(self._inotify, _ReadTap) else None
        if (
            type(event) is FileModifiedEvent
            and raw is not None
            and not isinstance(raw, tuple)
            and raw.is_attrib
            and not raw.is_modify
        ):
            event = FileAttribModifiedEvent(event.src_path)
        super().queue_event(event)
