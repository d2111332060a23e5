"""
rtest Watch Events.

Raw filesystem notifications as produced by the watch backend.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from enum import Enum


class Op(str, Enum):
    """Filesystem operation kinds."""

    CREATE = "CREATE"
    WRITE = "WRITE"
    REMOVE = "REMOVE"
    RENAME = "RENAME"
    CHMOD = "CHMOD"


@dataclass(frozen=True, slots=True)
class RawEvent:
    """A single notification: what happened to which path, and when it arrived."""

    path: str
    op: Op
    timestamp: float

    @property
    def throttle_key(self) -> str:
        """Key under which duplicates of this notification are collapsed."""
        return f"{self.path}:{self.op.value}"
