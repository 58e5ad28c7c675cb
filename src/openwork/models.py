"""Centralized Pydantic models and type aliases for openwork."""

from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from openwork.constants import (
    DEFAULT_HOST,
    DEFAULT_HOST_PORT,
    ENGINE_BREW_FORMULA,
    ENGINE_EXECUTABLE_POSIX,
    ENGINE_EXECUTABLE_WINDOWS,
    ENGINE_INSTALL_SCRIPT_URL,
    ENGINE_NPM_PACKAGE,
    ENGINE_WRAPPER_WINDOWS,
    LOG_BUFFER_SIZE,
)
from openwork.errors import ValidationError


# === Type Aliases ===

ConfigScope = Literal["project", "global"]

PlatformName = Literal["windows", "posix"]


# === Base Models (Building Blocks) ===


class WireModel(BaseModel):
    """Base for models exchanged with the UI layer (camelCase on the wire)."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TrackedProcess(BaseModel):
    """A process we started and are allowed to manage.

    create_time protects against PID reuse when walking the process tree.
    """

    pid: int | None = None
    create_time: float | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


# === Engine Models ===


class EngineInfo(WireModel):
    """Snapshot of the supervised engine, computed fresh on every query."""

    running: bool = False
    base_url: str | None = None
    project_dir: str | None = None
    hostname: str | None = None
    port: int | None = None
    pid: int | None = None

    @classmethod
    def stopped(cls) -> EngineInfo:
        """Create a snapshot indicating nothing is running."""
        return cls(running=False)


class DoctorReport(WireModel):
    """Result of probing the engine executable without starting it."""

    found: bool
    in_path: bool
    resolved_path: str | None = None
    version: str | None = None
    supports_serve: bool = False
    notes: list[str] = Field(default_factory=list)


class ExecResult(WireModel):
    """Result of running (or declining to run) an external command."""

    ok: bool
    status: int
    stdout: str = ""
    stderr: str = ""

    @classmethod
    def success(cls, message: str) -> ExecResult:
        """Create a successful result for an in-process operation."""
        return cls(ok=True, status=0, stdout=message, stderr="")

    @classmethod
    def failure(cls, message: str) -> ExecResult:
        """Create a non-ok result carrying guidance text."""
        return cls(ok=False, status=-1, stdout="", stderr=message)


class ConfigFile(WireModel):
    """An opencode.json file as seen on disk."""

    path: str
    exists: bool
    content: str | None = None


class ExecutableResolution(BaseModel):
    """Outcome of searching for the engine executable."""

    path: Path | None = None
    in_path: bool = False
    notes: list[str] = Field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.path is not None


class PlatformProfile(BaseModel):
    """Platform-specific engine lookup and install table."""

    name: PlatformName
    executable: str
    wrapper: str | None = None
    system_dirs: tuple[str, ...] = ()
    install_hints: tuple[str, ...] = ()
    guided_install: bool = False

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def is_windows(self) -> bool:
        return self.name == "windows"

    @property
    def search_names(self) -> tuple[str, ...]:
        """Names looked up on PATH, in order."""
        if self.wrapper:
            return (self.executable, self.wrapper)
        return (self.executable,)


PLATFORM_PROFILES: dict[PlatformName, PlatformProfile] = {
    "windows": PlatformProfile(
        name="windows",
        executable=ENGINE_EXECUTABLE_WINDOWS,
        wrapper=ENGINE_WRAPPER_WINDOWS,
        install_hints=(
            f"npm install -g {ENGINE_NPM_PACKAGE}",
            ENGINE_INSTALL_SCRIPT_URL,
        ),
        guided_install=False,
    ),
    "posix": PlatformProfile(
        name="posix",
        executable=ENGINE_EXECUTABLE_POSIX,
        system_dirs=("/opt/homebrew/bin", "/usr/local/bin", "/usr/bin"),
        install_hints=(
            f"npm install -g {ENGINE_NPM_PACKAGE}",
            f"brew install {ENGINE_BREW_FORMULA}",
            f"curl -fsSL {ENGINE_INSTALL_SCRIPT_URL} | bash",
        ),
        guided_install=True,
    ),
}

CURRENT_PLATFORM: PlatformProfile = PLATFORM_PROFILES[
    "windows" if os.name == "nt" else "posix"
]


# === Host Configuration Models ===


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from None


class HostConfig(BaseModel):
    """Configuration for the host server.

    This is the single source of truth for host server defaults.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_HOST_PORT
    log_buffer_size: int = LOG_BUFFER_SIZE

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> HostConfig:
        """Build a config from OPENWORK_* environment variables.

        Raises:
            ValidationError: If OPENWORK_PORT or OPENWORK_LOG_BUFFER_SIZE is not an integer
        """
        defaults = cls()
        return cls(
            host=os.environ.get("OPENWORK_HOST") or defaults.host,
            port=_env_int("OPENWORK_PORT", defaults.port),
            log_buffer_size=_env_int("OPENWORK_LOG_BUFFER_SIZE", defaults.log_buffer_size),
        )


# === Log Models ===


class LogEntry(BaseModel):
    """Strongly typed log entry model for the host server's log buffer."""

    timestamp: str
    level: str
    component: str
    content: str


class LogsResponse(BaseModel):
    """Response model for the logs endpoint."""

    logs: list[LogEntry]


# === API Request Models ===


class StartRequest(WireModel):
    project_dir: str


class WriteConfigRequest(WireModel):
    scope: str
    project_dir: str = ""
    content: str


class InstallPackageRequest(WireModel):
    project_dir: str
    package: str


class ImportSkillRequest(WireModel):
    project_dir: str
    source_dir: str
    overwrite: bool = False


class ErrorResponse(BaseModel):
    """Error body returned by the host server."""

    kind: str
    message: str
