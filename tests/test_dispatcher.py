"""
Tests for the Event Dispatcher and Event Loop.

Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from rtest.errors import ProcessLaunchError, StatError, WatchRegistrationError
from rtest.runner.invoker import TestInvoker
from rtest.watcher.debouncer import Debouncer
from rtest.watcher.dispatcher import EventDispatcher, EventLoop
from rtest.watcher.events import Op
from rtest.watcher.tree import WatchTreeBuilder
from rtest.testing import FakeBackend, FakeClock, RecordingInvoker, make_event

EXTRA = ["go", "test", "-v", "-run", "TestFoo"]


class TestEventDispatcher:
    """Test cases for EventDispatcher."""

    @pytest.fixture
    def dispatcher(self, backend: FakeBackend, invoker: RecordingInvoker) -> EventDispatcher:
        """Create a dispatcher over the fakes."""
        return EventDispatcher(backend, invoker)

    def test_write_source_runs_containing_dir(
        self, dispatcher: EventDispatcher, invoker: RecordingInvoker, project: Path
    ):
        """Test that a source write runs tests once in its directory with extra args."""
        dispatcher.handle(make_event(project / "a" / "x.go", Op.WRITE))

        assert invoker.runs == [(str(project / "a"), EXTRA)]

    def test_write_non_source_ignored(
        self, dispatcher: EventDispatcher, invoker: RecordingInvoker, project: Path
    ):
        """Test that writes to other file types do not run tests."""
        dispatcher.handle(make_event(project / "docs" / "readme.md", Op.WRITE))

        assert invoker.runs == []

    def test_write_needs_no_existing_file(
        self, dispatcher: EventDispatcher, invoker: RecordingInvoker, tmp_path: Path
    ):
        """Test that writes are not stat'ed before running tests."""
        dispatcher.handle(make_event(tmp_path / "gone" / "x.go", Op.WRITE))

        assert invoker.runs == [(str(tmp_path / "gone"), EXTRA)]

    def test_create_directory_adds_watch(
        self,
        dispatcher: EventDispatcher,
        backend: FakeBackend,
        invoker: RecordingInvoker,
        project: Path,
    ):
        """Test that a new directory is watched and no tests run."""
        new_dir = project / "a" / "c"
        new_dir.mkdir()

        dispatcher.handle(make_event(new_dir, Op.CREATE))

        assert str(new_dir) in backend.watched
        assert invoker.runs == []

    def test_create_source_file_runs_tests(
        self, dispatcher: EventDispatcher, invoker: RecordingInvoker, project: Path
    ):
        """Test that a new source file runs tests in its directory."""
        new_file = project / "a" / "new.go"
        new_file.write_text("package a\n")

        dispatcher.handle(make_event(new_file, Op.CREATE))

        assert invoker.runs == [(str(project / "a"), EXTRA)]

    def test_create_non_source_file_ignored(
        self, dispatcher: EventDispatcher, invoker: RecordingInvoker, project: Path
    ):
        """Test that a new non-source file neither runs tests nor is watched."""
        new_file = project / "a" / "notes.txt"
        new_file.write_text("notes\n")

        dispatcher.handle(make_event(new_file, Op.CREATE))

        assert invoker.runs == []

    def test_create_vendor_ignored_without_stat(
        self,
        dispatcher: EventDispatcher,
        backend: FakeBackend,
        invoker: RecordingInvoker,
        tmp_path: Path,
    ):
        """Test that entries named vendor are dropped before being inspected."""
        # Does not exist: a stat would raise StatError
        dispatcher.handle(make_event(tmp_path / "vendor", Op.CREATE))

        assert not backend.watched
        assert invoker.runs == []

    def test_create_vendor_directory_not_watched(
        self, dispatcher: EventDispatcher, backend: FakeBackend, project: Path
    ):
        """Test that a real vendor directory is never watched."""
        (project / "a" / "vendor").mkdir()

        dispatcher.handle(make_event(project / "a" / "vendor", Op.CREATE))

        assert not backend.watched

    def test_create_vanished_entry_raises(
        self, dispatcher: EventDispatcher, tmp_path: Path
    ):
        """Test that an entry removed before inspection is a StatError."""
        missing = tmp_path / "tmp-1234.go"

        with pytest.raises(StatError) as exc_info:
            dispatcher.handle(make_event(missing, Op.CREATE))

        assert exc_info.value.path == str(missing)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_create_refused_directory_raises(self, invoker: RecordingInvoker, project: Path):
        """Test that a refused watch on a new directory propagates."""
        new_dir = project / "refused"
        new_dir.mkdir()
        dispatcher = EventDispatcher(FakeBackend(refuse=[str(new_dir)]), invoker)

        with pytest.raises(WatchRegistrationError):
            dispatcher.handle(make_event(new_dir, Op.CREATE))

    @pytest.mark.parametrize("op", [Op.REMOVE, Op.RENAME, Op.CHMOD])
    def test_other_operations_ignored(
        self,
        dispatcher: EventDispatcher,
        backend: FakeBackend,
        invoker: RecordingInvoker,
        project: Path,
        op: Op,
    ):
        """Test that remove, rename and chmod do nothing."""
        backend.add(str(project / "a"))

        dispatcher.handle(make_event(project / "a", op))
        dispatcher.handle(make_event(project / "a" / "x.go", op))

        assert invoker.runs == []
        assert str(project / "a") in backend.watched

    def test_launch_failure_propagates(self, backend: FakeBackend, project: Path):
        """Test that a test command that cannot start is raised to the caller."""
        invoker = TestInvoker(command="rtest-no-such-binary-xyz")
        dispatcher = EventDispatcher(backend, invoker)

        with pytest.raises(ProcessLaunchError):
            dispatcher.handle(make_event(project / "a" / "x.go", Op.WRITE))


class TestEventLoop:
    """Test cases for EventLoop."""

    def _loop(
        self, backend: FakeBackend, invoker: TestInvoker, clock: FakeClock
    ) -> EventLoop:
        return EventLoop(backend, Debouncer(clock=clock), EventDispatcher(backend, invoker))

    def test_project_scenario(
        self, invoker: RecordingInvoker, clock: FakeClock, project: Path
    ):
        """Test startup watches and a write in a watched package."""
        backend = FakeBackend()
        WatchTreeBuilder(backend).build(project)

        assert str(project) in backend.watched
        assert str(project / "a") in backend.watched
        assert str(project / "vendor") not in backend.watched

        backend.push(make_event(project / "a" / "x.go", Op.WRITE))
        self._loop(backend, invoker, clock).run()

        assert invoker.runs == [(str(project / "a"), EXTRA)]

    def test_duplicates_collapsed(
        self, backend: FakeBackend, invoker: RecordingInvoker, clock: FakeClock, project: Path
    ):
        """Test that a burst of identical writes runs tests once."""
        event = make_event(project / "a" / "x.go", Op.WRITE)
        backend.push(event, event, event)

        self._loop(backend, invoker, clock).run()

        assert len(invoker.runs) == 1

    def test_create_then_write_both_handled(
        self, backend: FakeBackend, invoker: RecordingInvoker, clock: FakeClock, project: Path
    ):
        """Test that a write right after a create is not suppressed."""
        new_file = project / "a" / "new.go"
        new_file.write_text("package a\n")
        backend.push(make_event(new_file, Op.CREATE), make_event(new_file, Op.WRITE))

        self._loop(backend, invoker, clock).run()

        assert len(invoker.runs) == 2

    def test_new_directory_watched_before_next_event(
        self, backend: FakeBackend, invoker: RecordingInvoker, clock: FakeClock, project: Path
    ):
        """Test that a created directory is watched before events inside it."""
        new_dir = project / "pkg"
        new_dir.mkdir()
        (new_dir / "p.go").write_text("package pkg\n")
        backend.push(
            make_event(new_dir, Op.CREATE),
            make_event(new_dir / "p.go", Op.CREATE),
        )

        self._loop(backend, invoker, clock).run()

        assert str(new_dir) not in backend.watched_at_event[0]
        assert str(new_dir) in backend.watched_at_event[1]
        assert invoker.runs == [(str(new_dir), EXTRA)]

    def test_error_stops_loop(self, backend: FakeBackend, clock: FakeClock, project: Path):
        """Test that a launch failure ends the loop without draining later events."""
        invoker = TestInvoker(command="rtest-no-such-binary-xyz")
        backend.push(
            make_event(project / "a" / "x.go", Op.WRITE),
            make_event(project / "main.go", Op.WRITE),
        )

        with pytest.raises(ProcessLaunchError):
            self._loop(backend, invoker, clock).run()

        assert len(backend.watched_at_event) == 1

    def test_stat_error_stops_loop(
        self, backend: FakeBackend, invoker: RecordingInvoker, clock: FakeClock, tmp_path: Path
    ):
        """Test that a vanished entry ends the loop."""
        backend.push(
            make_event(tmp_path / "gone.go", Op.CREATE),
            make_event(tmp_path / "x.go", Op.WRITE),
        )

        with pytest.raises(StatError):
            self._loop(backend, invoker, clock).run()

        assert invoker.runs == []
