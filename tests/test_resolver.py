"""Tests for engine executable resolution."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from openwork.engine.resolver import (
    candidate_paths,
    not_found_message,
    path_entries,
    resolve_engine_executable,
)
from openwork.models import PLATFORM_PROFILES, PlatformProfile


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


def posix_profile(*system_dirs: Path) -> PlatformProfile:
    return PLATFORM_PROFILES["posix"].model_copy(
        update={"system_dirs": tuple(str(d) for d in system_dirs)}
    )


class TestPathSearch:
    """PATH is searched first and in order."""

    def test_path_entries_skips_empty(self) -> None:
        env = {"PATH": os.pathsep.join(["/a", "", "/b"])}
        assert path_entries(env) == [Path("/a"), Path("/b")]
        assert path_entries({}) == []

    def test_first_path_entry_wins(self, tmp_path: Path) -> None:
        first = touch(tmp_path / "one" / "opencode")
        touch(tmp_path / "two" / "opencode")
        env = {
            "PATH": os.pathsep.join([str(tmp_path / "one"), str(tmp_path / "two")]),
            "HOME": str(tmp_path / "home"),
        }

        resolution = resolve_engine_executable(posix_profile(), env)

        assert resolution.path == first
        assert resolution.in_path is True
        assert resolution.notes == [f"Found in PATH: {first}"]

    def test_directories_named_like_engine_are_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "bin" / "opencode").mkdir(parents=True)
        env = {"PATH": str(tmp_path / "bin"), "HOME": str(tmp_path / "home")}

        resolution = resolve_engine_executable(posix_profile(), env)

        assert resolution.path is None

    def test_windows_wrapper_found_on_path(self, tmp_path: Path) -> None:
        wrapper = touch(tmp_path / "npm" / "opencode.cmd")
        env = {"PATH": str(tmp_path / "npm"), "HOME": str(tmp_path / "home")}

        resolution = resolve_engine_executable(PLATFORM_PROFILES["windows"], env)

        assert resolution.path == wrapper
        assert resolution.in_path is True


class TestFallbackLocations:
    """Well-known locations are checked in order after PATH."""

    def test_posix_candidate_order(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        profile = posix_profile(tmp_path / "a", tmp_path / "b")

        assert candidate_paths(profile, {"HOME": str(home)}) == [
            home / ".opencode" / "bin" / "opencode",
            tmp_path / "a" / "opencode",
            tmp_path / "b" / "opencode",
        ]

    def test_windows_candidate_order(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        appdata = tmp_path / "appdata"
        env = {"HOME": str(home), "APPDATA": str(appdata)}

        assert candidate_paths(PLATFORM_PROFILES["windows"], env) == [
            home / ".opencode" / "bin" / "opencode.exe",
            appdata / "npm" / "opencode.cmd",
            appdata / "npm" / "opencode.exe",
            home / ".opencode" / "bin" / "opencode.cmd",
        ]

    def test_userprofile_used_without_home(self, tmp_path: Path) -> None:
        env = {"USERPROFILE": str(tmp_path)}
        paths = candidate_paths(posix_profile(), env)
        assert paths == [tmp_path / ".opencode" / "bin" / "opencode"]

    def test_found_in_fallback_records_misses(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        found = touch(tmp_path / "b" / "opencode")
        env = {"PATH": str(tmp_path / "empty"), "HOME": str(home)}

        resolution = resolve_engine_executable(
            posix_profile(tmp_path / "a", tmp_path / "b"), env
        )

        assert resolution.path == found
        assert resolution.in_path is False
        assert resolution.notes == [
            "Not found on PATH",
            f"Missing: {home / '.opencode' / 'bin' / 'opencode'}",
            f"Missing: {tmp_path / 'a' / 'opencode'}",
            f"Found at {found}",
        ]

    def test_home_install_preferred_over_system_dirs(self, tmp_path: Path) -> None:
        home = tmp_path / "home"
        preferred = touch(home / ".opencode" / "bin" / "opencode")
        touch(tmp_path / "sys" / "opencode")
        env = {"PATH": "", "HOME": str(home)}

        resolution = resolve_engine_executable(posix_profile(tmp_path / "sys"), env)

        assert resolution.path == preferred

    def test_not_found_notes_every_location(self, tmp_path: Path) -> None:
        profile = posix_profile(tmp_path / "a", tmp_path / "b")
        env = {"PATH": str(tmp_path / "empty"), "HOME": str(tmp_path / "home")}

        resolution = resolve_engine_executable(profile, env)

        assert resolution.path is None
        assert resolution.found is False
        assert resolution.notes[0] == "Not found on PATH"
        missing = [n for n in resolution.notes if n.startswith("Missing: ")]
        assert len(missing) == len(candidate_paths(profile, env))
        assert len(resolution.notes) == 1 + len(missing)


class TestSkippedLocations:
    """Unresolvable directories are skipped with a note instead of failing."""

    def test_no_home_directory(self, tmp_path: Path) -> None:
        resolution = resolve_engine_executable(posix_profile(tmp_path / "sys"), {})

        assert resolution.path is None
        assert resolution.notes == [
            "Not found on PATH",
            "Skipped home-directory locations: no home directory",
            f"Missing: {tmp_path / 'sys' / 'opencode'}",
        ]

    def test_windows_without_appdata(self, tmp_path: Path) -> None:
        notes: list[str] = []
        paths = candidate_paths(
            PLATFORM_PROFILES["windows"], {"HOME": str(tmp_path)}, notes
        )

        assert notes == ["Skipped npm global bin: APPDATA is not set"]
        assert paths == [
            tmp_path / ".opencode" / "bin" / "opencode.exe",
            tmp_path / ".opencode" / "bin" / "opencode.cmd",
        ]


def test_not_found_message_lists_hints_and_notes(tmp_path: Path) -> None:
    profile = posix_profile()
    resolution = resolve_engine_executable(profile, {"HOME": str(tmp_path)})

    message = not_found_message(resolution, profile)

    assert message.startswith("OpenCode CLI not found.")
    for hint in profile.install_hints:
        assert f"- {hint}" in message
    for note in resolution.notes:
        assert note in message


@pytest.mark.skipif(os.name == "nt", reason="POSIX name length limits")
class TestUnstatableLocations:
    """A location that cannot be stat'ed counts as missing."""

    def test_overlong_path_entry_is_skipped(self, tmp_path: Path) -> None:
        found = touch(tmp_path / "bin" / "opencode")
        env = {
            "PATH": os.pathsep.join(["/" + "x" * 300, str(tmp_path / "bin")]),
            "HOME": str(tmp_path / "home"),
        }

        resolution = resolve_engine_executable(posix_profile(), env)

        assert resolution.path == found
        assert resolution.in_path is True

    def test_overlong_fallback_noted_as_missing(self, tmp_path: Path) -> None:
        long_dir = Path("/" + "x" * 300)
        env = {"PATH": "/" + "y" * 300, "HOME": str(tmp_path / "home")}

        resolution = resolve_engine_executable(posix_profile(long_dir), env)

        assert resolution.path is None
        assert resolution.notes[-1] == f"Missing: {long_dir / 'opencode'}"
