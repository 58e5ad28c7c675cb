"""Entry point for the openwork CLI."""

import logging
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from typer import Exit, Option, Typer

from openwork import __version__
from openwork.cli.engine import HostOption, PortOption, engine_app, host_client
from openwork.cli.project import config_app, pkg_app, skill_app
from openwork.cli.render import report_errors
from openwork.cli.version import with_version
from openwork.constants import DEFAULT_HOST, DEFAULT_HOST_PORT
from openwork.host.server import run_host_server
from openwork.logging import LogComponent, configure_logging, print_log_entry
from openwork.models import HostConfig
from openwork.utils import console

app = Typer(
    name="openwork",
    help="Supervise a local opencode engine for OpenWork",
    no_args_is_help=True,
)
app.add_typer(engine_app)
app.add_typer(config_app)
app.add_typer(skill_app)
app.add_typer(pkg_app)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"openwork {__version__}")
        raise Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool, Option("--verbose", "-v", help="Print debug logs to the console")
    ] = False,
    version: Annotated[
        bool | None,
        Option("--version", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
):
    if verbose:
        configure_logging(echo=True, level=logging.DEBUG)


@app.command(name="serve", help="Run the host server in the foreground")
@with_version
def serve(
    host: Annotated[
        str | None, Option("--host", help="Address to bind (default from OPENWORK_HOST)")
    ] = None,
    port: Annotated[
        int | None, Option("--port", help="Port to bind (default from OPENWORK_PORT)")
    ] = None,
):
    """Load ./.env, then serve until interrupted."""
    load_dotenv(Path.cwd() / ".env")

    with report_errors():
        config = HostConfig.from_env()
    if host is not None:
        config.host = host
    if port is not None:
        config.port = port

    console.print(f"[bold green]🚀 Host server listening on {config.base_url}[/bold green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")
    run_host_server(config)


@app.command(name="logs", help="Display buffered logs from the host server")
def logs(
    host: HostOption = DEFAULT_HOST,
    port: PortOption = DEFAULT_HOST_PORT,
    component: Annotated[
        LogComponent | None,
        Option("--component", "-c", help="Show only logs from one component"),
    ] = None,
    raw: Annotated[
        bool,
        Option("--raw", help="Show raw log output without prefix formatting"),
    ] = False,
):
    client = host_client(host, port)
    with report_errors(client.base_url):
        entries = client.logs()

    if component is not None:
        entries = [e for e in entries if e.component == component.value]

    if not entries:
        console.print("[dim]No logs yet[/dim]")
        return

    for entry in entries:
        print_log_entry(entry, raw_output=raw)


if __name__ == "__main__":
    app()
