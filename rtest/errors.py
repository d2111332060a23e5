"""
rtest Errors.

Exception hierarchy for the watch/dispatch lifecycle.
Requires Python 3.11+.
"""

from pathlib import Path


class RtestError(Exception):
    """Base class for all rtest failures."""


class TraversalError(RtestError):
    """A directory could not be listed during the startup walk."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"error occurred while walking {self.path}: {reason}")


class WatchRegistrationError(RtestError):
    """The watch mechanism refused to watch a path."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"failed to add watch to {self.path}: {reason}")


class StatError(RtestError):
    """A newly created entry could not be inspected."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"failed to stat newly created file {self.path}: {reason}")


class ProcessLaunchError(RtestError):
    """The external test command could not be started."""

    def __init__(self, argv: list[str], directory: Path | str, reason: str) -> None:
        self.argv = list(argv)
        self.path = str(directory)
        super().__init__(
            f"failed to run {' '.join(self.argv)!r} in {self.path}: {reason}"
        )


class WatchError(RtestError):
    """The watch mechanism reported a fatal error."""
