"""Console rendering and error reporting shared by CLI commands."""

from collections.abc import Generator
from contextlib import contextmanager

import httpx
from rich.markup import escape
from rich.table import Table
from typer import Exit

from openwork.errors import OpenworkError
from openwork.models import DoctorReport, EngineInfo, ExecResult
from openwork.utils import console


@contextmanager
def report_errors(host_url: str | None = None) -> Generator[None, None, None]:
    """Print OpenworkError / connection failures and exit with code 1."""
    try:
        yield
    except OpenworkError as e:
        console.print(f"[red]❌ {escape(e.message)}[/red]")
        raise Exit(code=1)
    except httpx.ConnectError:
        console.print(f"[red]❌ Host server is not running at {host_url}[/red]")
        console.print("[dim]Run 'openwork serve' to start it.[/dim]")
        raise Exit(code=1)
    except httpx.HTTPError as e:
        console.print(f"[red]❌ Host server request failed: {escape(str(e))}[/red]")
        raise Exit(code=1)


def _status(ok: bool, yes: str, no: str) -> str:
    return f"[green]●[/green] {yes}" if ok else f"[red]●[/red] {no}"


def render_engine_info(info: EngineInfo) -> None:
    table = Table(title="Engine Status", show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan", width=12)
    table.add_column("Value")

    table.add_row("Status", _status(info.running, "Running", "Stopped"))
    if info.running:
        table.add_row("URL", str(info.base_url))
        table.add_row("Project", escape(str(info.project_dir)))
        table.add_row("PID", str(info.pid))

    console.print(table)


def render_doctor(report: DoctorReport) -> None:
    table = Table(title="Engine Doctor", show_header=True, header_style="bold magenta")
    table.add_column("Check", style="cyan", width=14)
    table.add_column("Result")

    table.add_row("Found", _status(report.found, "Yes", "No"))
    table.add_row("On PATH", _status(report.in_path, "Yes", "No"))
    table.add_row("Path", escape(report.resolved_path or "-"))
    table.add_row("Version", escape(report.version or "-"))
    table.add_row("Serve mode", _status(report.supports_serve, "Supported", "Unsupported"))

    console.print(table)
    console.print()
    for note in report.notes:
        console.print(f"[dim]{escape(note)}[/dim]")


def render_exec_result(result: ExecResult) -> None:
    """Print captured output and exit non-zero if the command failed."""
    if result.stdout:
        console.print(escape(result.stdout.rstrip()))
    if result.stderr:
        color = "yellow" if result.ok else "red"
        console.print(f"[{color}]{escape(result.stderr.rstrip())}[/{color}]")
    if not result.ok:
        raise Exit(code=1)
