"""Diagnostics for the engine executable (does not touch the supervisor)."""

from __future__ import annotations

import subprocess
from pathlib import Path

from openwork.constants import CHECK_TIMEOUT_SECONDS
from openwork.engine.resolver import resolve_engine_executable
from openwork.logging import LogComponent, get_logger
from openwork.models import DoctorReport, PlatformProfile

logger = get_logger(LogComponent.DOCTOR)


def engine_version(program: Path, timeout: float = CHECK_TIMEOUT_SECONDS) -> str | None:
    """Return `<program> --version` output (stdout, else stderr), or None."""
    try:
        result = subprocess.run(
            [str(program), "--version"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Version check for {program} failed: {e}")
        return None

    stdout = (result.stdout or "").strip()
    if stdout:
        return stdout
    stderr = (result.stderr or "").strip()
    if stderr:
        return stderr
    return None


def engine_supports_serve(
    program: Path, timeout: float = CHECK_TIMEOUT_SECONDS
) -> bool:
    """Return True if `<program> serve --help` exits successfully."""
    try:
        result = subprocess.run(
            [str(program), "serve", "--help"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Serve check for {program} failed: {e}")
        return False
    return result.returncode == 0


def doctor(profile: PlatformProfile | None = None) -> DoctorReport:
    """Inspect the engine executable. Never raises."""
    resolution = resolve_engine_executable(profile)

    version: str | None = None
    supports_serve = False
    if resolution.path is not None:
        version = engine_version(resolution.path)
        supports_serve = engine_supports_serve(resolution.path)
        logger.info(
            f"Engine at {resolution.path}: version={version!r} supports_serve={supports_serve}"
        )

    return DoctorReport(
        found=resolution.found,
        in_path=resolution.in_path,
        resolved_path=str(resolution.path) if resolution.path is not None else None,
        version=version,
        supports_serve=supports_serve,
        notes=resolution.notes,
    )
