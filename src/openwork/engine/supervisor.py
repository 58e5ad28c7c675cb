"""Engine supervisor - sole owner of the running opencode process.

State is either Stopped (no run) or Running (an EngineRun). The run record
holds the process handle together with the endpoint it was started on, so the
handle and its endpoint fields are always set and cleared as one unit.

Every public operation takes the supervisor lock for its whole duration.
Start and stop therefore serialize; both are rare, user-triggered actions.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from types import TracebackType
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from openwork.constants import ENGINE_CORS_ORIGINS, ENGINE_HOSTNAME
from openwork.engine.ports import find_free_port
from openwork.engine.process_control import EngineProcess, spawn_process
from openwork.engine.resolver import not_found_message, resolve_engine_executable
from openwork.errors import NotFoundError, SpawnError, ValidationError
from openwork.logging import LogComponent, get_logger
from openwork.models import (
    CURRENT_PLATFORM,
    EngineInfo,
    ExecutableResolution,
    PlatformProfile,
)

logger = get_logger(LogComponent.SUPERVISOR)

Resolver = Callable[[], ExecutableResolution]
PortAllocator = Callable[[], int]
Spawner = Callable[[list[str], Path], EngineProcess]


class EngineRun(BaseModel):
    """The current run: process handle plus the endpoint it serves on."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        arbitrary_types_allowed=True, frozen=True
    )

    process: EngineProcess
    project_dir: str
    hostname: str
    port: int

    @property
    def base_url(self) -> str:
        return f"http://{self.hostname}:{self.port}"


def build_serve_command(program: Path, hostname: str, port: int) -> list[str]:
    """Build the fixed argv used to launch the engine in serve mode."""
    argv = [str(program), "serve", "--hostname", hostname, "--port", str(port)]
    for origin in ENGINE_CORS_ORIGINS:
        argv.extend(["--cors", origin])
    return argv


class EngineSupervisor:
    """Starts, stops and reports on the single engine instance."""

    def __init__(
        self,
        *,
        resolver: Resolver | None = None,
        allocate_port: PortAllocator | None = None,
        spawn: Spawner | None = None,
        profile: PlatformProfile | None = None,
    ):
        """Initialize an empty (stopped) supervisor.

        Args:
            resolver: Locates the engine executable
            allocate_port: Returns a free loopback port
            spawn: Launches argv in a working directory, returning the owned handle
            profile: Platform table used for install hints
        """
        self.profile: PlatformProfile = profile or CURRENT_PLATFORM
        self._resolve: Resolver = resolver or (
            lambda: resolve_engine_executable(self.profile)
        )
        self._allocate_port: PortAllocator = allocate_port or find_free_port
        self._spawn: Spawner = spawn or spawn_process
        self._lock: threading.Lock = threading.Lock()
        self._run: EngineRun | None = None

    def __enter__(self) -> EngineSupervisor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    # === Operations ===

    def start(self, project_dir: str) -> EngineInfo:
        """Start the engine for `project_dir`, replacing any current run.

        Raises:
            ValidationError: If project_dir is empty
            AllocationError: If no free port is available (state untouched)
            NotFoundError: If the engine executable cannot be located
            SpawnError: If the OS refuses to launch the engine
        """
        project_dir = project_dir.strip()
        if not project_dir:
            raise ValidationError("projectDir is required")

        hostname = ENGINE_HOSTNAME
        port = self._allocate_port()

        with self._lock:
            # Start always supersedes the previous run, even if it then fails.
            self._stop_locked()

            resolution = self._resolve()
            if resolution.path is None:
                raise NotFoundError(not_found_message(resolution, self.profile))

            argv = build_serve_command(resolution.path, hostname, port)
            logger.info(f"Starting engine: {' '.join(argv)} (cwd={project_dir})")
            try:
                process = self._spawn(argv, Path(project_dir))
            except OSError as e:
                logger.error(f"Failed to start opencode: {e}")
                raise SpawnError(f"Failed to start opencode: {e}") from e

            self._run = EngineRun(
                process=process,
                project_dir=project_dir,
                hostname=hostname,
                port=port,
            )
            logger.info(f"Engine running pid={process.pid} at {self._run.base_url}")
            return self._snapshot_locked()

    def stop(self) -> EngineInfo:
        """Stop the engine if running. Never fails; idempotent."""
        with self._lock:
            self._stop_locked()
            return self._snapshot_locked()

    def info(self) -> EngineInfo:
        """Report the engine state, noticing if it exited on its own."""
        with self._lock:
            return self._snapshot_locked()

    @property
    def is_running(self) -> bool:
        return self.info().running

    # === Locked helpers (caller holds self._lock) ===

    def _snapshot_locked(self) -> EngineInfo:
        run = self._run
        if run is None:
            return EngineInfo.stopped()

        try:
            exit_code = run.process.poll()
        except Exception as e:
            # A failed liveness check must not make a healthy engine look stopped.
            logger.debug(f"Liveness check for pid={run.process.pid} failed: {e}")
            exit_code = None

        if exit_code is not None:
            logger.warning(
                f"Engine pid={run.process.pid} exited on its own (code {exit_code})"
            )
            self._run = None
            return EngineInfo.stopped()

        return EngineInfo(
            running=True,
            base_url=run.base_url,
            project_dir=run.project_dir,
            hostname=run.hostname,
            port=run.port,
            pid=run.process.pid,
        )

    def _stop_locked(self) -> None:
        run, self._run = self._run, None
        if run is None:
            return
        logger.info(f"Stopping engine pid={run.process.pid}")
        try:
            run.process.kill_and_wait()
        except Exception as e:
            logger.warning(f"Failed to stop engine pid={run.process.pid}: {e}")
