"""Read and write opencode.json at project or global scope."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import cast

from openwork.constants import OPENCODE_CONFIG_DIRNAME, OPENCODE_CONFIG_FILENAME
from openwork.errors import StorageError, ValidationError
from openwork.logging import LogComponent, get_logger
from openwork.models import ConfigFile, ConfigScope, ExecResult
from openwork.utils import ensure_dir, env_path, home_dir

logger = get_logger(LogComponent.CONFIG)

CONFIG_SCOPES: tuple[ConfigScope, ...] = ("project", "global")


def parse_scope(scope: str) -> ConfigScope:
    scope = scope.strip()
    if scope not in CONFIG_SCOPES:
        raise ValidationError("scope must be 'project' or 'global'")
    return cast(ConfigScope, scope)


def global_config_base(env: Mapping[str, str] | None = None) -> Path:
    """XDG config base, falling back to `<home>/.config`."""
    xdg = env_path("XDG_CONFIG_HOME", env)
    if xdg is not None:
        return xdg
    home = home_dir(env)
    if home is not None:
        return home / ".config"
    raise StorageError("Unable to resolve config directory")


def resolve_config_path(
    scope: str, project_dir: str, env: Mapping[str, str] | None = None
) -> Path:
    """Resolve the opencode.json path for a scope.

    Raises:
        ValidationError: Unknown scope, or project scope without a project dir
        StorageError: Global scope with no resolvable config directory
    """
    if parse_scope(scope) == "project":
        if not project_dir.strip():
            raise ValidationError("projectDir is required")
        return Path(project_dir.strip()) / OPENCODE_CONFIG_FILENAME

    return global_config_base(env) / OPENCODE_CONFIG_DIRNAME / OPENCODE_CONFIG_FILENAME


def read_config(scope: str, project_dir: str = "") -> ConfigFile:
    """Read opencode.json for a scope. A missing file is not an error."""
    path = resolve_config_path(scope, project_dir)
    exists = path.exists()

    content: str | None = None
    if exists:
        try:
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    return ConfigFile(path=str(path), exists=exists, content=content)


def write_config(scope: str, project_dir: str, content: str) -> ExecResult:
    """Write opencode.json for a scope, creating parent directories."""
    path = resolve_config_path(scope, project_dir)

    try:
        ensure_dir(path.parent)
    except OSError as e:
        raise StorageError(f"Failed to create config dir {path.parent}: {e}") from e

    try:
        path.write_bytes(content.encode("utf-8"))
    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}") from e

    logger.info(f"Wrote {path}")
    return ExecResult.success(f"Wrote {path}")
