"""Project-level commands: opencode config, skills and packages."""

from pathlib import Path
from typing import Annotated

from rich.markup import escape
from rich.syntax import Syntax
from typer import Argument, Exit, Option, Typer

from openwork.cli.render import render_exec_result, report_errors
from openwork.config_store import read_config, write_config
from openwork.packages import install_package
from openwork.skills import import_skill
from openwork.utils import console, progress_spinner

config_app = Typer(name="config", help="Read and write opencode.json")
skill_app = Typer(name="skill", help="Manage project skills")
pkg_app = Typer(name="pkg", help="Install OpenPackage packages")

ProjectDirOption = Annotated[
    Path | None,
    Option(
        "--project-dir",
        "-p",
        help="The project directory. If not provided, current working directory will be used",
    ),
]


def _project_dir(project_dir: Path | None) -> str:
    return str((project_dir or Path.cwd()).resolve())


@config_app.command(name="read", help="Print the opencode config for a scope")
def config_read(
    scope: Annotated[str, Argument(help="'project' or 'global'")],
    project_dir: ProjectDirOption = None,
):
    with report_errors():
        config = read_config(scope, _project_dir(project_dir))

    console.print(f"[dim]{escape(config.path)}[/dim]")
    if not config.exists:
        console.print("[yellow]⚠️  Config file does not exist[/yellow]")
        return
    console.print(Syntax(config.content or "", "json", word_wrap=True))


@config_app.command(name="write", help="Write a file's contents as the opencode config")
def config_write(
    scope: Annotated[str, Argument(help="'project' or 'global'")],
    file: Annotated[
        Path,
        Argument(help="File whose contents become the new config", exists=True, dir_okay=False),
    ],
    project_dir: ProjectDirOption = None,
):
    try:
        content = file.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[red]❌ Failed to read {escape(str(file))}: {escape(str(e))}[/red]")
        raise Exit(code=1)

    with report_errors():
        result = write_config(scope, _project_dir(project_dir), content)

    render_exec_result(result)


@skill_app.command(name="import", help="Copy a skill directory into the project")
def skill_import(
    source_dir: Annotated[Path, Argument(help="The skill directory to import")],
    project_dir: ProjectDirOption = None,
    overwrite: Annotated[
        bool, Option("--overwrite", help="Replace an existing skill with the same name")
    ] = False,
):
    with report_errors():
        result = import_skill(
            _project_dir(project_dir), str(source_dir.resolve()), overwrite
        )

    render_exec_result(result)


@pkg_app.command(name="install", help="Install a package with the OpenPackage CLI")
def pkg_install(
    package: Annotated[str, Argument(help="The package to install")],
    project_dir: ProjectDirOption = None,
):
    with report_errors():
        with progress_spinner(f"📦 Installing {package}...", "✅ Install finished"):
            result = install_package(_project_dir(project_dir), package)

    render_exec_result(result)
