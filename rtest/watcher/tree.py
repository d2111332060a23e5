"""
rtest Watch Tree Builder.

Registers a watch on every directory of a tree at startup.
Requires Python 3.11+.
"""

import os
from pathlib import Path

from rtest.errors import TraversalError
from rtest.utils.logger import LoggerMixin
from rtest.watcher.backend import WatchBackend


class WatchTreeBuilder(LoggerMixin):
    """
    Walks a root directory once and watches it and all its descendants.

    Subtrees rooted at a directory named ``excluded_name`` are never
    entered. The root itself is always watched.
    """

    def __init__(self, backend: WatchBackend, excluded_name: str = "vendor") -> None:
        self._backend = backend
        self._excluded_name = excluded_name

    def build(self, root: Path | str) -> frozenset[str]:
        """
        Populate the backend's watch set.

        Args:
            root: Directory to watch

        Returns:
            The watch set after the walk

        Raises:
            TraversalError: if any directory cannot be listed
            WatchRegistrationError: if the backend refuses a directory
        """
        root = os.path.abspath(root)

        def _raise(exc: OSError) -> None:
            raise TraversalError(exc.filename or root, exc.strerror or str(exc)) from exc

        for dirpath, dirnames, _ in os.walk(root, onerror=_raise):
            # Prune in place so excluded subtrees are never listed
            dirnames[:] = [d for d in dirnames if d != self._excluded_name]
            self._backend.add(dirpath)

        watched = self._backend.watched
        self.log.info("watch_tree_ready", root=root, directories=len(watched))
        return watched
