"""Import a skill directory into a project's `.opencode/skill/` folder."""

from __future__ import annotations

import shutil
from pathlib import Path

from openwork.constants import SKILLS_RELATIVE_DIR
from openwork.errors import AlreadyExistsError, StorageError, ValidationError
from openwork.logging import LogComponent, get_logger
from openwork.models import ExecResult

logger = get_logger(LogComponent.SKILLS)


def _ignore_non_regular(directory: str, names: list[str]) -> set[str]:
    """copytree ignore hook: skip symlinks and anything not a file or directory."""
    skipped: set[str] = set()
    for name in names:
        entry = Path(directory) / name
        if entry.is_symlink() or not (entry.is_file() or entry.is_dir()):
            skipped.add(name)
    return skipped


def copy_dir_recursive(src: Path, dest: Path) -> None:
    """Copy regular files and directories from src into dest.

    Raises:
        ValidationError: If src is not a directory
        StorageError: If any copy fails
    """
    if not src.is_dir():
        raise ValidationError(f"Source is not a directory: {src}")
    try:
        shutil.copytree(src, dest, ignore=_ignore_non_regular, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise StorageError(f"Failed to copy {src} -> {dest}: {e}") from e


def skill_destination(project_dir: Path, name: str) -> Path:
    return project_dir.joinpath(*SKILLS_RELATIVE_DIR, name)


def import_skill(project_dir: str, source_dir: str, overwrite: bool = False) -> ExecResult:
    """Copy `source_dir` into `<project_dir>/.opencode/skill/<name>`.

    Raises:
        ValidationError: Missing inputs, or no usable skill name / source dir
        AlreadyExistsError: Destination exists and overwrite is False
        StorageError: Removing or copying failed
    """
    project_dir = project_dir.strip()
    if not project_dir:
        raise ValidationError("projectDir is required")
    source_dir = source_dir.strip()
    if not source_dir:
        raise ValidationError("sourceDir is required")

    src = Path(source_dir)
    name = src.name
    if not name or name in (".", ".."):
        raise ValidationError("Failed to infer skill name from directory")

    dest = skill_destination(Path(project_dir), name)

    # Checked before anything under dest is removed.
    if not src.is_dir():
        raise ValidationError(f"Source is not a directory: {src}")
    if src.resolve().is_relative_to(dest.resolve()):
        raise ValidationError(f"Source is inside the destination: {src}")

    if dest.exists():
        if not overwrite:
            raise AlreadyExistsError(f"Skill already exists at {dest}")
        try:
            shutil.rmtree(dest)
        except OSError as e:
            raise StorageError(f"Failed to remove existing skill dir {dest}: {e}") from e

    copy_dir_recursive(src, dest)

    logger.info(f"Imported skill {name} to {dest}")
    return ExecResult.success(f"Imported skill to {dest}")
