"""ScaffoldKit command-line interface."""

from __future__ import annotations

import json
import logging
import re
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import CONFIG_FILENAME, load_config, write_starter_config
from .exceptions import ScaffoldKitError
from .models import ChangeAction, ScaffoldData, ScaffoldResult
from .registry import EntityRegistry
from .scaffolder import Scaffolder
from .service import ScaffoldService, entity_from_data
from .store import ArtifactStore
from .typemap import classify

app = typer.Typer(
    name="scaffold",
    help="ScaffoldKit: CRUD scaffolding for Fiber + GORM projects",
    add_completion=False,
)
console = Console()

_ACTION_STYLES = {
    ChangeAction.CREATED: "green",
    ChangeAction.UPDATED: "yellow",
    ChangeAction.REPLACED: "yellow",
    ChangeAction.UNCHANGED: "dim",
}


def _get_version_string() -> str:
    """Get version string from package metadata or pyproject.toml."""
    try:
        return get_version("scaffoldkit")
    except PackageNotFoundError:
        pass

    # Try to read version from pyproject.toml for development installs
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        content = pyproject_path.read_text()
        match = re.search(r'version\s*=\s*["\']([^"\']+)["\']', content)
        if match:
            return f"{match.group(1)} (development)"

    return "unknown"


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"ScaffoldKit version {_get_version_string()}")
        raise typer.Exit


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """ScaffoldKit: CRUD scaffolding for Fiber + GORM projects."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _parse_field(value: str) -> dict[str, str]:
    name, _, type_token = value.partition(":")
    return {"name": name.strip(), "type": type_token.strip() or "string"}


def _print_result(result: ScaffoldResult) -> None:
    table = Table(title=f"{result.entity} ({result.table_name})")
    table.add_column("Artifact", style="cyan")
    table.add_column("Action")

    for change in result.changes:
        style = _ACTION_STYLES[change.action]
        table.add_row(change.path, f"[{style}]{change.action.value}[/{style}]")

    console.print(table)


@app.command()
def init(
    path: Path = typer.Option(
        Path.cwd(),
        "--path",
        "-p",
        help="Go project root",
    ),
    project_name: str = typer.Option(
        "",
        "--project",
        help="Go module path used in generated imports",
    ),
) -> None:
    """Write a starter .scaffoldkit.yaml configuration."""
    config_path = path / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[yellow]Warning:[/yellow] Config exists at {config_path}")
        if not typer.confirm("Overwrite existing config?"):
            console.print("Initialization cancelled")
            return

    try:
        path.mkdir(parents=True, exist_ok=True)
        write_starter_config(path, project_name)
    except OSError as e:
        console.print(f"[red]Error:[/red] Failed to write config: {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]✓[/green] Config written to {config_path}")
    console.print("\nNext steps:")
    console.print("  1. Set project_name (or export PROJECT_NAME)")
    console.print("  2. Run 'scaffold new <table> -f name:TYPE' to generate an entity")


@app.command()
def new(
    table_name: str = typer.Argument(..., help="snake_case table name"),
    field: list[str] = typer.Option(
        [],
        "--field",
        "-f",
        help="Field as name:TYPE (can be repeated)",
    ),
    ref: str = typer.Option(
        "",
        "--ref",
        help="Previously scaffolded table to reference",
    ),
    path: Path = typer.Option(
        Path.cwd(),
        "--path",
        "-p",
        help="Go project root",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    replace: bool = typer.Option(
        False,
        "--replace",
        help="Regenerate an entity that is already scaffolded",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would change without writing files",
    ),
) -> None:
    """Scaffold model, migration, handlers, routes and views for a table."""
    try:
        config = load_config(path)
        entity = entity_from_data(
            ScaffoldData(
                table_name=table_name,
                ref_table_name=ref,
                fields=[_parse_field(f) for f in field],
            ),
        )
        scaffolder = Scaffolder(ArtifactStore(path), config)
        result = scaffolder.scaffold(entity, replace=replace, dry_run=dry_run)
    except ScaffoldKitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if dry_run:
        console.print("[bold blue]Dry run - no files written[/bold blue]")
    _print_result(result)

    if not dry_run:
        console.print(f"[green]✓[/green] Scaffolded {result.entity}")
        console.print("Run the migration from /dev/migrate to create the table.")


@app.command()
def submit(
    request_file: Path = typer.Argument(
        ...,
        help="JSON submission body",
        exists=True,
        dir_okay=False,
    ),
    path: Path = typer.Option(
        Path.cwd(),
        "--path",
        "-p",
        help="Go project root",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    replace: bool = typer.Option(
        False,
        "--replace",
        help="Regenerate an entity that is already scaffolded",
    ),
) -> None:
    """Process a submission body as the dev endpoint would."""
    try:
        payload = json.loads(request_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        payload = None

    try:
        config = load_config(path)
    except ScaffoldKitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    service = ScaffoldService(Scaffolder(ArtifactStore(path), config), replace=replace)
    submission = service.submit(payload)
    console.print_json(data=submission.body)

    if not submission.ok:
        raise typer.Exit(1)


@app.command("list")
def list_entities(
    path: Path = typer.Option(
        Path.cwd(),
        "--path",
        "-p",
        help="Go project root",
    ),
) -> None:
    """List scaffolded entities from the registry."""
    try:
        config = load_config(path)
        entities = EntityRegistry(ArtifactStore(path), config.paths.registry).load()
    except ScaffoldKitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if not entities:
        console.print("[yellow]No entities scaffolded yet.[/yellow]")
        return

    table = Table(title="Scaffolded Entities")
    table.add_column("Entity", style="cyan")
    table.add_column("Fields")

    for name in sorted(entities):
        fields = ", ".join(f"{f.name}:{f.type}" for f in entities[name])
        table.add_row(name, fields or "[dim]none[/dim]")

    console.print(table)


@app.command("classify")
def classify_types(
    type_tokens: list[str] = typer.Argument(..., help="Column types to classify"),
) -> None:
    """Show how column types map onto Go types."""
    table = Table(title="Type Mapping")
    table.add_column("Input", style="cyan")
    table.add_column("Target")
    table.add_column("Go type")

    for token in type_tokens:
        target = classify(token)
        table.add_row(token, target.value, target.go_type)

    console.print(table)


@app.command()
def version() -> None:
    """Show ScaffoldKit version."""
    console.print(f"ScaffoldKit version {_get_version_string()}")


if __name__ == "__main__":
    app()
