"""
Main CLI entry point for EstreUI.
"""

# Standard library imports
import asyncio
import importlib.metadata
from pathlib import Path
from typing import Optional

# Third-party imports
import typer

# Local imports
from estreui.dev_server import run_dev_server
from estreui.environment import EnvironmentError, get_env_config
from estreui.errors import DevServerError, EstreUIError
from estreui.library.manager import LibraryManager
from estreui.npm import NpmClient
from estreui.project import init_project, update_project
from estreui.utils.paths import ProjectPaths
from estreui.utils.rich_console import get_console, get_console_logger, print_error, print_panel, print_table


console = get_console()
logger = get_console_logger()

DEFAULT_PROJECT_NAME = "my-estreui-app"

app = typer.Typer(help="EstreUI - CLI for the no-build JavaScript framework")


def fail(error: Exception) -> typer.Exit:
    """Print an error panel and return the exit with status 1."""
    message = getattr(error, "message", str(error))
    if isinstance(error, DevServerError) and error.hints:
        message = "\n".join([message, ""] + error.hints)
    print_error(message)
    return typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """
    EstreUI - CLI for the no-build JavaScript framework
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(init, name=None)


@app.command()
def init(name: Optional[str] = typer.Argument(None, help="Project directory, '.' for the current one")):
    """Initialize a new EstreUI project."""
    if name is None:
        name = typer.prompt("Project name", default=DEFAULT_PROJECT_NAME)
    try:
        config = get_env_config()
        result = asyncio.run(
            init_project(name, core_path=config.ESTREUI_CORE_PATH, npm_executable=config.ESTREUI_NPM)
        )
    except (EstreUIError, EnvironmentError) as error:
        raise fail(error) from error

    if result.missing_libraries:
        logger.warning(f"Libraries not found: {', '.join(result.missing_libraries)}")
    logger.success("Project initialized successfully!")
    print_panel(f"cd {name}\nnpm run dev", title="Next steps", style="bold green")


@app.command()
def update():
    """Update project assets from the installed estreui package."""
    logger.info("Updating project assets from latest estreui version...")
    try:
        config = get_env_config()
        report = asyncio.run(
            update_project(
                Path.cwd(),
                core_path=config.ESTREUI_CORE_PATH,
                npm_executable=config.ESTREUI_NPM,
                ignore_file=config.ESTREUI_IGNORE_FILE,
            )
        )
    except (EstreUIError, EnvironmentError) as error:
        raise fail(error) from error

    print_table(
        ["Result", "Count"],
        [
            ["Copied", len(report.copied)],
            ["Skipped (ignored)", len(report.skipped)],
            ["Missing in core", len(report.missing)],
        ],
        title="Update",
    )
    logger.success("Update complete!")


def _library_manager() -> LibraryManager:
    config = get_env_config()
    paths = ProjectPaths.for_root(Path.cwd())
    return LibraryManager(paths, npm=NpmClient(paths.root_dir, config.ESTREUI_NPM))


@app.command()
def add(package: str = typer.Argument(..., help="Package name")):
    """Install a library and add it to scripts/lib, index.html and serviceWorker.js."""
    try:
        change = _library_manager().add(package)
    except (EstreUIError, EnvironmentError) as error:
        raise fail(error) from error

    if change.not_found is not None:
        tried = ", ".join(change.not_found.tried) or "(none)"
        print_panel(
            f"Could not find the main JS file for {package}.\n"
            f"Tried: {tried}\n"
            "Copy the file to scripts/lib manually and add it to index.html.",
            title="Manual step needed",
            style="bold yellow",
        )
        return
    logger.success(f"Added {package}")


@app.command()
def remove(package: str = typer.Argument(..., help="Package name")):
    """Uninstall a library and remove its files and references."""
    try:
        change = _library_manager().remove(package)
    except (EstreUIError, EnvironmentError) as error:
        raise fail(error) from error

    if not change.files and not change.index_updated and not change.manifest_updated:
        logger.warning(f"No files or references of {package} were found")
    logger.success(f"Removed {package}")


@app.command()
def dev(
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
    no_browser: bool = typer.Option(False, "--no-browser", help="Do not open the browser"),
):
    """Start the HTTPS development server."""
    try:
        config = get_env_config()
        run_dev_server(Path.cwd(), port or config.ESTREUI_DEV_PORT, open_browser=not no_browser)
    except (EstreUIError, EnvironmentError) as error:
        raise fail(error) from error
    except KeyboardInterrupt:
        typer.echo("\nServer stopped.")


@app.command()
def version():
    """Show the EstreUI CLI version."""
    try:
        installed = importlib.metadata.version("estreui-cli")
    except importlib.metadata.PackageNotFoundError:
        from estreui import __version__ as installed
    typer.echo(f"EstreUI CLI version: {installed}")
