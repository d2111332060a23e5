"""
rtest Test Configuration.

Pytest fixtures.
Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from rtest.testing import FakeBackend, FakeClock, RecordingInvoker


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at an arbitrary non-zero time."""
    return FakeClock()


@pytest.fixture
def backend() -> FakeBackend:
    """An empty fake watch backend."""
    return FakeBackend()


@pytest.fixture
def invoker() -> RecordingInvoker:
    """A recording invoker with pass-through arguments."""
    return RecordingInvoker(extra_args=["-v", "-run", "TestFoo"])


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    A small Go-style tree.

    proj/
        main.go
        a/x.go
        a/b/
        vendor/y.go
        vendor/pkg/z.go
        docs/readme.md
    """
    root = tmp_path / "proj"
    (root / "a" / "b").mkdir(parents=True)
    (root / "vendor" / "pkg").mkdir(parents=True)
    (root / "docs").mkdir()

    (root / "main.go").write_text("package main\n")
    (root / "a" / "x.go").write_text("package a\n")
    (root / "vendor" / "y.go").write_text("package vendor\n")
    (root / "vendor" / "pkg" / "z.go").write_text("package pkg\n")
    (root / "docs" / "readme.md").write_text("# docs\n")
    return root
