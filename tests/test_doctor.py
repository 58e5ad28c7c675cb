"""Tests for engine diagnostics."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest

from openwork.engine.doctor import doctor, engine_supports_serve, engine_version
from openwork.models import PLATFORM_PROFILES, PlatformProfile

posix_only = pytest.mark.skipif(
    os.name == "nt", reason="fake engines are POSIX shell scripts"
)


@pytest.fixture
def profile(tmp_path: Path) -> PlatformProfile:
    """POSIX profile whose system dirs live under tmp_path."""
    return PLATFORM_PROFILES["posix"].model_copy(
        update={"system_dirs": (str(tmp_path / "sys"),)}
    )


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point PATH and HOME at empty directories under tmp_path."""
    (tmp_path / "bin").mkdir(exist_ok=True)
    monkeypatch.setenv("PATH", str(tmp_path / "bin"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("USERPROFILE", raising=False)
    return tmp_path / "bin"


class TestDoctor:
    """doctor() never raises and reports what it found."""

    def test_absent_engine(self, isolated_env: Path, profile: PlatformProfile) -> None:
        report = doctor(profile)

        assert report.found is False
        assert report.in_path is False
        assert report.resolved_path is None
        assert report.version is None
        assert report.supports_serve is False
        assert report.notes[0] == "Not found on PATH"
        assert all(n.startswith("Missing: ") for n in report.notes[1:])
        assert len(report.notes) == 3

    @posix_only
    def test_engine_on_path(
        self, isolated_env: Path, fake_engine: Path, profile: PlatformProfile
    ) -> None:
        report = doctor(profile)

        assert report.found is True
        assert report.in_path is True
        assert report.resolved_path == str(fake_engine)
        assert report.version == "opencode 0.9.1"
        assert report.supports_serve is True
        assert report.notes == [f"Found in PATH: {fake_engine}"]

    @posix_only
    def test_engine_in_fallback_location(
        self,
        isolated_env: Path,
        profile: PlatformProfile,
        tmp_path: Path,
        write_script: Callable[[Path, str], Path],
    ) -> None:
        engine = write_script(
            tmp_path / "sys" / "opencode", "#!/bin/sh\necho 'opencode 1.0.0'\n"
        )

        report = doctor(profile)

        assert report.found is True
        assert report.in_path is False
        assert report.resolved_path == str(engine)
        assert report.notes[-1] == f"Found at {engine}"

    @posix_only
    def test_engine_without_serve(
        self,
        isolated_env: Path,
        profile: PlatformProfile,
        write_script: Callable[[Path, str], Path],
    ) -> None:
        write_script(
            isolated_env / "opencode",
            '#!/bin/sh\nif [ "$1" = "--version" ]; then echo old; exit 0; fi\nexit 2\n',
        )

        report = doctor(profile)

        assert report.found is True
        assert report.version == "old"
        assert report.supports_serve is False


@posix_only
class TestEngineChecks:
    """Version and serve checks."""

    def test_version_falls_back_to_stderr(
        self, tmp_path: Path, write_script: Callable[[Path, str], Path]
    ) -> None:
        engine = write_script(tmp_path / "opencode", "#!/bin/sh\necho '  v2  ' >&2\n")
        assert engine_version(engine) == "v2"

    def test_silent_version_is_none(
        self, tmp_path: Path, write_script: Callable[[Path, str], Path]
    ) -> None:
        engine = write_script(tmp_path / "opencode", "#!/bin/sh\nexit 0\n")
        assert engine_version(engine) is None

    def test_check_timeout_counts_as_failure(
        self, tmp_path: Path, write_script: Callable[[Path, str], Path]
    ) -> None:
        engine = write_script(tmp_path / "opencode", "#!/bin/sh\nexec sleep 10\n")
        assert engine_version(engine, timeout=0.5) is None
        assert engine_supports_serve(engine, timeout=0.5) is False

    def test_missing_program(self, tmp_path: Path) -> None:
        assert engine_version(tmp_path / "nope") is None
        assert engine_supports_serve(tmp_path / "nope") is False


@posix_only
def test_unstatable_path_entry_does_not_raise(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("PATH", "/" + "x" * 300)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    profile = PLATFORM_PROFILES["posix"].model_copy(update={"system_dirs": ()})

    report = doctor(profile)

    assert report.found is False
    assert report.notes[0] == "Not found on PATH"
