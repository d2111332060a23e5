"""
rtest Command Line Entry Point.

Watches a tree and re-runs tests for whichever directory changed.
Requires Python 3.11+.

Usage:
    rtest [--rtest-debug] [--root DIR] [--no-stdin] [--] [test args...]
"""

import argparse
import os
import signal
import sys
import threading
from collections.abc import Sequence
from pathlib import Path

from rtest.errors import RtestError
from rtest.runner.invoker import TestInvoker
from rtest.runner.trigger import ManualTriggerReader
from rtest.utils.config import RunConfig, get_settings
from rtest.utils.logger import configure_logging, get_logger
from rtest.watcher.backend import WatchdogBackend
from rtest.watcher.debouncer import Debouncer
from rtest.watcher.dispatcher import EventDispatcher, EventLoop
from rtest.watcher.tree import WatchTreeBuilder

logger = get_logger("rtest")


def parse_args(argv: Sequence[str] | None = None) -> RunConfig:
    """
    Build the run configuration from the command line.

    Anything not recognised here is forwarded verbatim to the test command.
    """
    parser = argparse.ArgumentParser(
        prog="rtest",
        description="Re-run tests for the directory of every changed source file",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--rtest-debug",
        action="store_true",
        help="Turn on watch event debug information",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Directory to watch (default: current directory)",
    )
    parser.add_argument(
        "--no-stdin",
        action="store_true",
        help="Do not re-run the full suite when enter is pressed",
    )

    args, extra = parser.parse_known_args(argv)
    if extra and extra[0] == "--":
        extra = extra[1:]

    root = args.root if args.root is not None else Path(os.getcwd())
    return RunConfig(
        root=root.resolve(),
        debug=args.rtest_debug,
        extra_args=tuple(extra),
        read_stdin=not args.no_stdin,
    )


def _run_event_loop(loop: EventLoop) -> None:
    """Thread target: a failure ends watching but not the process."""
    try:
        loop.run()
    except RtestError as e:
        logger.error("event_loop_failed", error=str(e), path=getattr(e, "path", None))
        return
    logger.debug("event_loop_stopped")


def main(argv: Sequence[str] | None = None) -> int:
    """Run until interrupted. Returns the process exit status."""
    config = parse_args(argv)
    configure_logging(debug=config.debug)
    settings = get_settings().runner
    root = str(config.root)

    invoker = TestInvoker(
        command=settings.command,
        subcommand=settings.subcommand,
        extra_args=config.extra_args,
        source_extension=settings.source_extension,
    )

    backend = WatchdogBackend()
    try:
        WatchTreeBuilder(backend, settings.excluded_dir).build(root)
    except RtestError as e:
        logger.error("startup_failed", error=str(e), path=getattr(e, "path", root))
        backend.close()
        return 1

    loop = EventLoop(
        backend,
        Debouncer(max_entries=settings.throttle_max_entries),
        EventDispatcher(backend, invoker, settings.excluded_dir),
    )
    threading.Thread(
        target=_run_event_loop, args=(loop,), name="rtest-events", daemon=True
    ).start()

    if config.read_stdin:
        reader = ManualTriggerReader(invoker, root, sys.stdin)
        threading.Thread(target=reader.run, name="rtest-stdin", daemon=True).start()

    stop = threading.Event()

    def _on_signal(signum: int, frame: object) -> None:
        stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    logger.info("watching", root=root, extra_args=list(config.extra_args))
    while not stop.wait(1.0):
        pass

    logger.info("exiting")
    try:
        backend.close()
    except (OSError, RuntimeError) as e:
        logger.error("shutdown_failed", error=str(e))
        return 1
    return 0
