"""Engine commands for the openwork CLI."""

from pathlib import Path
from typing import Annotated

from typer import Argument, Option, Typer

from openwork.cli.render import (
    render_doctor,
    render_engine_info,
    render_exec_result,
    report_errors,
)
from openwork.cli.version import with_version
from openwork.constants import DEFAULT_HOST, DEFAULT_HOST_PORT
from openwork.engine.doctor import doctor
from openwork.engine.installer import install_engine
from openwork.host.client import HostClient
from openwork.utils import console, progress_spinner

engine_app = Typer(name="engine", help="Manage the opencode engine")

HostOption = Annotated[
    str, Option("--host", envvar="OPENWORK_HOST", help="Host server address")
]
PortOption = Annotated[
    int, Option("--port", envvar="OPENWORK_PORT", help="Host server port")
]


def host_client(host: str, port: int) -> HostClient:
    return HostClient(base_url=f"http://{host}:{port}")


@engine_app.command(name="start", help="Start the engine for a project directory")
@with_version
def engine_start(
    project_dir: Annotated[
        Path | None,
        Argument(
            help="The project directory. If not provided, current working directory will be used"
        ),
    ] = None,
    host: HostOption = DEFAULT_HOST,
    port: PortOption = DEFAULT_HOST_PORT,
):
    """Start the engine through the host server."""
    if project_dir is None:
        project_dir = Path.cwd()

    client = host_client(host, port)
    with report_errors(client.base_url):
        info = client.start(str(project_dir.resolve()))

    console.print("[bold green]✨ Engine started[/bold green]")
    render_engine_info(info)


@engine_app.command(name="stop", help="Stop the engine")
def engine_stop(
    host: HostOption = DEFAULT_HOST,
    port: PortOption = DEFAULT_HOST_PORT,
):
    """Stop the engine through the host server."""
    client = host_client(host, port)
    with report_errors(client.base_url):
        info = client.stop()

    console.print("[bold green]✨ Engine stopped[/bold green]")
    render_engine_info(info)


@engine_app.command(name="info", help="Show engine status")
def engine_info(
    host: HostOption = DEFAULT_HOST,
    port: PortOption = DEFAULT_HOST_PORT,
):
    """Show the engine snapshot from the host server."""
    client = host_client(host, port)
    with report_errors(client.base_url):
        info = client.info()

    render_engine_info(info)


@engine_app.command(name="doctor", help="Diagnose the local engine installation")
@with_version
def engine_doctor():
    """Locate the engine and check its version and serve support."""
    report = doctor()
    render_doctor(report)
    if not report.found:
        console.print()
        console.print(
            "[yellow]💡 Run 'openwork engine install' or install opencode manually.[/yellow]"
        )


@engine_app.command(name="install", help="Install the engine with the upstream installer")
@with_version
def engine_install():
    """Run the guided engine installer."""
    with report_errors():
        with progress_spinner("📦 Installing opencode...", "✅ Installer finished"):
            result = install_engine()

    render_exec_result(result)
