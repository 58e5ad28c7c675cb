"""Guided install of the engine via the upstream install script."""

from __future__ import annotations

import os
from pathlib import Path

from openwork.constants import ENGINE_INSTALL_SCRIPT_URL
from openwork.errors import SpawnError
from openwork.logging import LogComponent, get_logger
from openwork.models import CURRENT_PLATFORM, ExecResult, PlatformProfile
from openwork.utils import home_dir, run_capture

logger = get_logger(LogComponent.INSTALLER)


def install_dir() -> Path:
    """Directory the install script is pointed at (`~/.opencode/bin`)."""
    return (home_dir() or Path(".")) / ".opencode" / "bin"


def unsupported_install_message(profile: PlatformProfile) -> str:
    hints = "\n".join(f"- {hint}" for hint in profile.install_hints)
    return (
        f"Guided install is not supported on {profile.name} yet. "
        f"Install OpenCode via:\n{hints}\n\nThen restart OpenWork."
    )


def install_engine(profile: PlatformProfile | None = None) -> ExecResult:
    """Run the engine install script, capturing its output.

    Platforms without guided install get a non-ok result with instructions.

    Raises:
        SpawnError: If the installer shell cannot be launched
    """
    profile = profile or CURRENT_PLATFORM
    if not profile.guided_install:
        return ExecResult.failure(unsupported_install_message(profile))

    target = install_dir()
    env = dict(os.environ)
    env["OPENCODE_INSTALL_DIR"] = str(target)

    logger.info(f"Running engine installer into {target}")
    try:
        result = run_capture(
            ["bash", "-lc", f"curl -fsSL {ENGINE_INSTALL_SCRIPT_URL} | bash"],
            env=env,
        )
    except OSError as e:
        raise SpawnError(f"Failed to run installer: {e}") from e

    if not result.ok:
        logger.warning(f"Engine installer exited with status {result.status}")
    return result
