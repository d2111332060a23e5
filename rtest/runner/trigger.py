"""
rtest Manual Trigger Reader.

Re-runs the whole suite each time the operator presses enter.
Requires Python 3.11+.
"""

from typing import TextIO

from rtest.errors import RtestError
from rtest.runner.invoker import TestInvoker
from rtest.utils.logger import LoggerMixin


class ManualTriggerReader(LoggerMixin):
    """
    Reads lines from a text stream; each one runs tests for the root.

    Failures are reported and the reader keeps going. It never touches
    the watch set.
    """

    def __init__(self, invoker: TestInvoker, root: str, stream: TextIO) -> None:
        self._invoker = invoker
        self._root = root
        self._stream = stream

    def run(self) -> int:
        """
        Consume the stream until EOF.

        Returns:
            Number of runs triggered
        """
        triggered = 0
        for _ in self._stream:
            triggered += 1
            try:
                self._invoker.run_for_dir(self._root)
            except RtestError as e:
                self.log.error("manual_run_failed", path=self._root, error=str(e))

        self.log.debug("manual_trigger_closed", triggered=triggered)
        return triggered
