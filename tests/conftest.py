"""Shared fixtures: fake engine executables and mocked process handles."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from unittest.mock import Mock

import pytest

from openwork.engine.process_control import EngineProcess
from openwork.logging import configure_logging

FAKE_ENGINE_VERSION = "opencode 0.9.1"

FAKE_ENGINE_SCRIPT = f"""#!/bin/sh
case "$1" in
  --version)
    echo "{FAKE_ENGINE_VERSION}"
    exit 0
    ;;
  serve)
    if [ "$2" = "--help" ]; then
      echo "usage: opencode serve"
      exit 0
    fi
    exec sleep 60
    ;;
esac
exit 1
"""


def write_executable(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def write_script() -> Callable[[Path, str], Path]:
    """Factory writing an executable shell script."""
    return write_executable


@pytest.fixture
def fake_engine(tmp_path: Path) -> Path:
    """A well-behaved `opencode` in its own bin directory."""
    return write_executable(tmp_path / "bin" / "opencode", FAKE_ENGINE_SCRIPT)


@pytest.fixture
def make_process() -> Callable[..., Mock]:
    """Factory for process handles that never touch a real PID."""
    counter = iter(range(1000, 2000))

    def _make(exit_code: int | None = None) -> Mock:
        proc = Mock(spec=EngineProcess)
        proc.pid = next(counter)
        proc.poll.return_value = exit_code
        return proc

    return _make


@contextmanager
def in_path(path: Path) -> Iterator[None]:
    """Temporarily change the current working directory."""
    current_dir = os.getcwd()
    os.chdir(path)
    try:
        yield
    finally:
        os.chdir(current_dir)


@pytest.fixture
def cwd() -> Callable[[Path], AbstractContextManager[None]]:
    """Factory for a context manager that runs the block inside a directory."""
    return in_path


@pytest.fixture
def reset_logging() -> Iterator[None]:
    yield
    configure_logging()
