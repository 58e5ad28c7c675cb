"""FastAPI host server that owns the engine supervisor.

Architecture:
- One EngineSupervisor per server, created with the app and closed over by the
  handlers (no module-level state)
- Handlers are plain `def` functions, so Starlette runs them on its worker
  thread pool; concurrent requests race for real and the supervisor lock
  serializes them
- The lifespan stops the engine on shutdown so it is not orphaned
"""

from __future__ import annotations

from collections import deque
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated

import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from openwork import __version__
from openwork.config_store import read_config, write_config
from openwork.engine.doctor import doctor
from openwork.engine.installer import install_engine
from openwork.engine.supervisor import EngineSupervisor
from openwork.errors import OpenworkError
from openwork.logging import (
    LogBuffer,
    LogComponent,
    buffered_entries,
    configure_logging,
    configured_level,
    get_logger,
)
from openwork.models import (
    ConfigFile,
    DoctorReport,
    EngineInfo,
    ErrorResponse,
    ExecResult,
    HostConfig,
    ImportSkillRequest,
    InstallPackageRequest,
    LogsResponse,
    StartRequest,
    WriteConfigRequest,
)
from openwork.packages import install_package
from openwork.skills import import_skill

logger = get_logger(LogComponent.SERVER)


def create_host_server(
    supervisor: EngineSupervisor | None = None,
    config: HostConfig | None = None,
) -> FastAPI:
    """Create the host server FastAPI app.

    Args:
        supervisor: Engine supervisor to expose (a fresh one by default)
        config: Host configuration

    Returns:
        FastAPI app instance
    """
    config = config or HostConfig()
    engine = supervisor or EngineSupervisor()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"Host server ready on {config.base_url}")
        try:
            yield
        finally:
            # Don't leave the engine running after the host goes away.
            engine.stop()
            logger.info("Host server stopped")

    app = FastAPI(
        title="OpenWork Host",
        description="Supervises the opencode engine for the OpenWork desktop app",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.supervisor = engine

    @app.exception_handler(OpenworkError)
    async def openwork_error_handler(_: Request, exc: OpenworkError) -> JSONResponse:
        logger.warning(f"{exc.kind}: {exc.message}")
        body = ErrorResponse(kind=exc.kind, message=exc.message)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.get("/")
    def root():
        """Root endpoint."""
        return {"message": "OpenWork Host", "status": "running"}

    # === Engine ===

    @app.post("/engine/start", response_model=EngineInfo)
    def engine_start(request: StartRequest) -> EngineInfo:
        return engine.start(request.project_dir)

    @app.post("/engine/stop", response_model=EngineInfo)
    def engine_stop() -> EngineInfo:
        return engine.stop()

    @app.get("/engine/info", response_model=EngineInfo)
    def engine_info() -> EngineInfo:
        return engine.info()

    @app.get("/engine/doctor", response_model=DoctorReport)
    def engine_doctor() -> DoctorReport:
        return doctor(engine.profile)

    @app.post("/engine/install", response_model=ExecResult)
    def engine_install() -> ExecResult:
        return install_engine(engine.profile)

    # === Project collaborators ===

    @app.get("/config", response_model=ConfigFile)
    def get_config(
        scope: Annotated[str, Query(description="'project' or 'global'")],
        project_dir: Annotated[str, Query(alias="projectDir")] = "",
    ) -> ConfigFile:
        return read_config(scope, project_dir)

    @app.put("/config", response_model=ExecResult)
    def put_config(request: WriteConfigRequest) -> ExecResult:
        return write_config(request.scope, request.project_dir, request.content)

    @app.post("/packages/install", response_model=ExecResult)
    def packages_install(request: InstallPackageRequest) -> ExecResult:
        return install_package(request.project_dir, request.package)

    @app.post("/skills/import", response_model=ExecResult)
    def skills_import(request: ImportSkillRequest) -> ExecResult:
        return import_skill(request.project_dir, request.source_dir, request.overwrite)

    # === Logs ===

    @app.get("/logs", response_model=LogsResponse)
    def logs() -> LogsResponse:
        return LogsResponse(logs=buffered_entries())

    return app


def run_host_server(
    config: HostConfig, *, echo: bool = True, level: int | None = None
) -> None:
    """Run the host server in the foreground until interrupted.

    Args:
        config: Host configuration (bind address, log buffer size)
        echo: Also print logs to the console
        level: Log level (defaults to the level logging is already configured with)
    """
    buffer: LogBuffer = deque(maxlen=config.log_buffer_size)
    configure_logging(
        buffer=buffer,
        echo=echo,
        level=level if level is not None else configured_level(),
    )

    app = create_host_server(EngineSupervisor(), config)

    uv_config = uvicorn.Config(
        app=app,
        host=config.host,
        port=config.port,
        log_level="warning",
    )
    server = uvicorn.Server(uv_config)
    server.run()
