"""Install OpenPackage packages into a project via whichever CLI is available."""

from __future__ import annotations

import shutil
from pathlib import Path

from openwork.errors import SpawnError, ValidationError
from openwork.logging import LogComponent, get_logger
from openwork.models import ExecResult
from openwork.utils import run_capture

logger = get_logger(LogComponent.PACKAGES)

PACKAGE_CLI_NOT_FOUND = (
    "OpenPackage CLI not found. Install with `npm install -g opkg` "
    "(or `openpackage`), or ensure pnpm/npx is available."
)


def installer_commands(package: str) -> list[list[str]]:
    """Candidate install commands, in preference order."""
    return [
        ["opkg", "install", package],
        ["openpackage", "install", package],
        ["pnpm", "dlx", "opkg", "install", package],
        ["npx", "opkg", "install", package],
    ]


def install_package(project_dir: str, package: str) -> ExecResult:
    """Install `package` into `project_dir` with the first available tool.

    The first tool found on PATH runs and its result is returned whatever its
    exit code. A missing tool just moves on to the next candidate.

    Raises:
        ValidationError: If project_dir or package is empty
        SpawnError: If a tool that exists fails to launch
    """
    project_dir = project_dir.strip()
    if not project_dir:
        raise ValidationError("projectDir is required")
    package = package.strip()
    if not package:
        raise ValidationError("package is required")

    for cmd in installer_commands(package):
        program = shutil.which(cmd[0])
        if program is None:
            logger.debug(f"{cmd[0]} not found, trying next installer")
            continue

        logger.info(f"Installing {package} with {' '.join(cmd)} in {project_dir}")
        try:
            return run_capture([program, *cmd[1:]], cwd=Path(project_dir))
        except OSError as e:
            raise SpawnError(f"Failed to run {cmd[0]}: {e}") from e

    logger.warning(f"No package installer available for {package}")
    return ExecResult.failure(PACKAGE_CLI_NOT_FOUND)
