"""
rtest Event Dispatcher.

Maps accepted file system events to watch registrations and test runs.
Requires Python 3.11+.
"""

import os
import stat

from rtest.errors import StatError
from rtest.runner.invoker import TestInvoker
from rtest.utils.logger import LoggerMixin
from rtest.watcher.backend import WatchBackend
from rtest.watcher.debouncer import Debouncer
from rtest.watcher.events import Op, RawEvent


class EventDispatcher(LoggerMixin):
    """
    Handles one accepted event at a time.

    Create: watch new directories, test new source files.
    Write: test the containing directory.
    Remove, Rename, Chmod: nothing. Watches on removed directories are
    left to expire in the backend.
    """

    def __init__(
        self,
        backend: WatchBackend,
        invoker: TestInvoker,
        excluded_name: str = "vendor",
    ) -> None:
        self._backend = backend
        self._invoker = invoker
        self._excluded_name = excluded_name

    def handle(self, event: RawEvent) -> None:
        """
        Dispatch a single event.

        Raises:
            StatError: if a created entry cannot be inspected
            WatchRegistrationError: if a new directory cannot be watched
            ProcessLaunchError: if the test command cannot be started
        """
        if event.op is Op.CREATE:
            self._on_create(event.path)
        elif event.op is Op.WRITE:
            self._invoker.run_for_file(event.path)

    def _on_create(self, path: str) -> None:
        # Applies to files and directories alike, so check before stat
        if os.path.basename(path) == self._excluded_name:
            return

        try:
            mode = os.stat(path).st_mode
        except OSError as exc:
            raise StatError(path, exc.strerror or str(exc)) from exc

        if stat.S_ISDIR(mode):
            self._backend.add(path)
        else:
            self._invoker.run_for_file(path)


class EventLoop(LoggerMixin):
    """
    Drains the backend's event stream through the debouncer and dispatcher.

    Strictly sequential: a test run blocks the next event. Any error ends
    the loop.
    """

    def __init__(
        self,
        backend: WatchBackend,
        debouncer: Debouncer,
        dispatcher: EventDispatcher,
    ) -> None:
        self._backend = backend
        self._debouncer = debouncer
        self._dispatcher = dispatcher

    def run(self) -> None:
        """Process events until the backend closes or an error is raised."""
        for event in self._backend.events():
            self.log.debug("watcher_event", path=event.path, op=event.op.value)
            if not self._debouncer.accept(event):
                continue
            self._dispatcher.handle(event)
