from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError

from .buildscript import create_supervisor
from .config import BuildSettings
from .exceptions import BuildGraphError
from .logging import configure_logging, get_logger
from .supervisor import Supervisor

app = typer.Typer(add_completion=False, help="Build orchestration for the product")
log = get_logger("buildgraph.cli")


def load_settings(**overrides: Any) -> BuildSettings:
    """Settings from the environment, overridden by the options that were given."""
    try:
        return BuildSettings(
            **{name: value for name, value in overrides.items() if value is not None}
        )
    except ValidationError as e:
        typer.echo(f"Invalid settings:\n{e}", err=True)
        raise typer.Exit(code=2) from e


def _abort(error: BuildGraphError) -> typer.Exit:
    log.error("build_aborted", error=str(error))
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(code=1)


def _supervisor(settings: BuildSettings) -> Supervisor:
    try:
        return create_supervisor(settings)
    except BuildGraphError as e:
        raise _abort(e) from e


@app.command()
def run(
    target: str = typer.Argument(None, help="Task to run [default: Default]"),
    source: str = typer.Option(None, help="Package feed for the Push task"),
    api_key: str = typer.Option(
        None, "--api-key", help="Credential for the package feed"
    ),
    version: str = typer.Option(None, help="Version for the versioning tasks"),
    # omitted flags fall back to the environment, `--no-...` overrides it
    skip_clean: Optional[bool] = typer.Option(
        None, "--skip-clean/--no-skip-clean", help="Keep existing artifacts"
    ),
    skip_tests: Optional[bool] = typer.Option(
        None, "--skip-tests/--no-skip-tests", help="Skip the Test task"
    ),
    dry_run: Optional[bool] = typer.Option(
        None, "--dry-run/--no-dry-run", help="Show what would run"
    ),
    configuration: str = typer.Option(None, help="Build profile"),
    root: Path = typer.Option(None, "--root", help="Repository root"),
    artifacts_dir: Path = typer.Option(
        None, "--artifacts-dir", help="Output directory, relative to the root"
    ),
    log_format: str = typer.Option(None, help="Log renderer: console or json"),
):
    """Resolve TARGET and run it with its dependencies."""
    settings = load_settings(
        target=target,
        source=source,
        api_key=api_key,
        version=version,
        skip_clean=skip_clean,
        skip_tests=skip_tests,
        dry_run=dry_run,
        configuration=configuration,
        root_dir=root,
        artifacts_dir=artifacts_dir,
        log_format=log_format,
    )
    configure_logging(force_json=settings.log_format == "json")

    supervisor = _supervisor(settings)
    try:
        report = supervisor.run_target()
    except BuildGraphError as e:
        raise _abort(e) from e

    typer.echo(report.summary())

    if not report.succeeded:
        typer.echo(f"Error: {report.error}", err=True)
        raise typer.Exit(code=1)


@app.command("tasks")
def list_tasks(root: Path = typer.Option(None, "--root", help="Repository root")):
    """List the available tasks with their descriptions."""
    configure_logging()
    supervisor = _supervisor(load_settings(root_dir=root))

    for name, description in supervisor.describe():
        typer.echo(f"{name:<24}{description}".rstrip())


@app.command()
def tree(
    target: str = typer.Argument(None, help="Task to show [default: Default]"),
    root: Path = typer.Option(None, "--root", help="Repository root"),
):
    """Show the dependency tree of TARGET."""
    configure_logging()
    supervisor = _supervisor(load_settings(target=target, root_dir=root))

    try:
        typer.echo(str(supervisor.tree()))
    except BuildGraphError as e:
        raise _abort(e) from e


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
