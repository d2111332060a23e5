"""
rtest Test Invoker.

Runs the external test command for one directory.
Requires Python 3.11+.
"""

import os
import subprocess
from collections.abc import Sequence

from rtest.errors import ProcessLaunchError
from rtest.utils.logger import LoggerMixin


class TestInvoker(LoggerMixin):
    """
    Synchronously runs ``<command> <subcommand> <extra args...>``.

    Output goes straight to this process's stdout/stderr. The exit
    status is only logged: failing tests are the command's business.
    """

    def __init__(
        self,
        command: str = "go",
        subcommand: str = "test",
        extra_args: Sequence[str] = (),
        source_extension: str = ".go",
    ) -> None:
        """
        Initialize the invoker.

        Args:
            command: Test executable looked up on PATH
            subcommand: Fixed first argument
            extra_args: Passed through verbatim after the subcommand
            source_extension: Only files with this extension trigger a run
        """
        self._command = command
        self._subcommand = subcommand
        self._extra_args = tuple(extra_args)
        self._source_extension = source_extension

    @property
    def argv(self) -> list[str]:
        return [self._command, self._subcommand, *self._extra_args]

    def is_source(self, path: str) -> bool:
        """Check if a path has the recognized source extension."""
        name = os.path.basename(path)
        dot = name.rfind(".")
        # Everything from the last dot, so a file named ".go" counts too
        return dot >= 0 and name[dot:] == self._source_extension

    def run_for_file(self, path: str) -> int | None:
        """
        Run tests for the directory containing ``path``.

        Returns:
            The command's exit status, or None if ``path`` is not a
            source file and nothing was run
        """
        if not self.is_source(path):
            return None
        return self.run_for_dir(os.path.dirname(path))

    def run_for_dir(self, directory: str) -> int:
        """
        Run tests scoped to ``directory`` and wait for them to finish.

        Raises:
            ProcessLaunchError: if the command cannot be started
        """
        argv = self.argv
        self.log.debug("running", command=" ".join(argv), cwd=directory)

        try:
            completed = subprocess.run(argv, cwd=directory, check=False)
        except OSError as exc:
            raise ProcessLaunchError(argv, directory, exc.strerror or str(exc)) from exc

        self.log.debug("finished", cwd=directory, returncode=completed.returncode)
        return completed.returncode
