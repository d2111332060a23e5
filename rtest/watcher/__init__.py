"""
rtest File Watcher Package.

Watch registration, debouncing and dispatch of file system events.
Requires Python 3.11+.
"""

from rtest.watcher.backend import WatchBackend, WatchdogBackend
from rtest.watcher.debouncer import THROTTLE_WINDOW_MS, Debouncer, ThrottleTable
from rtest.watcher.dispatcher import EventDispatcher, EventLoop
from rtest.watcher.events import Op, RawEvent
from rtest.watcher.tree import WatchTreeBuilder

__all__ = [
    "WatchBackend",
    "WatchdogBackend",
    "THROTTLE_WINDOW_MS",
    "Debouncer",
    "ThrottleTable",
    "EventDispatcher",
    "EventLoop",
    "Op",
    "RawEvent",
    "WatchTreeBuilder",
]
