"""Locate the opencode executable on the host.

The search order is PATH first, then a per-platform list of well-known install
locations. Every location checked is recorded in the resolution notes, which
is what users see when the engine can't be found.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from openwork.logging import LogComponent, get_logger
from openwork.models import CURRENT_PLATFORM, ExecutableResolution, PlatformProfile
from openwork.utils import env_path, home_dir

logger = get_logger(LogComponent.RESOLVER)


def path_entries(env: Mapping[str, str] | None = None) -> list[Path]:
    """Return the directories listed in PATH, in order."""
    raw = (env if env is not None else os.environ).get("PATH")
    if not raw:
        return []
    return [Path(entry) for entry in raw.split(os.pathsep) if entry]


def is_regular_file(path: Path) -> bool:
    """is_file() that treats any stat failure as "not a file"."""
    try:
        return path.is_file()
    except OSError as e:
        logger.debug(f"Cannot stat {path}: {e}")
        return False


def resolve_in_path(name: str, env: Mapping[str, str] | None = None) -> Path | None:
    """Return the first regular file called `name` found on PATH."""
    for directory in path_entries(env):
        candidate = directory / name
        if is_regular_file(candidate):
            return candidate
    return None


def candidate_paths(
    profile: PlatformProfile | None = None,
    env: Mapping[str, str] | None = None,
    notes: list[str] | None = None,
) -> list[Path]:
    """Well-known install locations for the engine, in search order.

    Locations that depend on an unresolvable directory are left out; when
    `notes` is given, a line explaining the omission is appended to it.
    """
    profile = profile or CURRENT_PLATFORM
    candidates: list[Path] = []

    home = home_dir(env)
    opencode_bin = home / ".opencode" / "bin" if home is not None else None

    if opencode_bin is not None:
        candidates.append(opencode_bin / profile.executable)
    elif notes is not None:
        notes.append("Skipped home-directory locations: no home directory")

    if profile.is_windows:
        # npm's global bin on Windows is %APPDATA%\npm (opencode.cmd wrapper script)
        appdata = env_path("APPDATA", env)
        if appdata is not None:
            npm_bin = appdata / "npm"
            if profile.wrapper:
                candidates.append(npm_bin / profile.wrapper)
            candidates.append(npm_bin / profile.executable)
        elif notes is not None:
            notes.append("Skipped npm global bin: APPDATA is not set")

        if opencode_bin is not None and profile.wrapper:
            candidates.append(opencode_bin / profile.wrapper)
    else:
        candidates.extend(Path(d) / profile.executable for d in profile.system_dirs)

    return candidates


def resolve_engine_executable(
    profile: PlatformProfile | None = None,
    env: Mapping[str, str] | None = None,
) -> ExecutableResolution:
    """Find the engine executable.

    PATH is searched for the primary executable name (and, on Windows, the
    npm wrapper script) before any fallback location is checked.

    Args:
        profile: Platform table to use (defaults to the current platform)
        env: Environment mapping (defaults to os.environ)

    Returns:
        The resolved path (if any), whether it came from PATH, and the notes
    """
    profile = profile or CURRENT_PLATFORM
    notes: list[str] = []

    for name in profile.search_names:
        found = resolve_in_path(name, env)
        if found is not None:
            notes.append(f"Found in PATH: {found}")
            logger.debug(f"Resolved {name} on PATH at {found}")
            return ExecutableResolution(path=found, in_path=True, notes=notes)

    notes.append("Not found on PATH")

    for candidate in candidate_paths(profile, env, notes):
        if is_regular_file(candidate):
            notes.append(f"Found at {candidate}")
            logger.debug(f"Resolved engine at fallback location {candidate}")
            return ExecutableResolution(path=candidate, in_path=False, notes=notes)
        notes.append(f"Missing: {candidate}")

    logger.info(f"Engine executable not found ({len(notes)} locations noted)")
    return ExecutableResolution(path=None, in_path=False, notes=notes)


def not_found_message(
    resolution: ExecutableResolution, profile: PlatformProfile | None = None
) -> str:
    """Build the user-facing message for a failed resolution."""
    profile = profile or CURRENT_PLATFORM
    hints = "\n".join(f"- {hint}" for hint in profile.install_hints)
    notes = "\n".join(resolution.notes)
    return f"OpenCode CLI not found.\n\nInstall with:\n{hints}\n\nNotes:\n{notes}"
