"""reforge CLI - rename symbols across a source tree."""

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reforge import __version__
from reforge.config import ProjectConfig
from reforge.errors import ReforgeError, classify_error
from reforge.loader import load_directory, save_files
from reforge.logging import bind_command, get_logger, setup_logging
from reforge.project import Project

log = get_logger(__name__)

console = Console()


def _parse_location(location: str) -> tuple[str, int, int]:
    """Split ``path:line:column`` into its parts."""
    try:
        path, line, column = location.rsplit(":", 2)
        return path, int(line), int(column)
    except ValueError:
        raise click.BadParameter(
            f"expected FILE:LINE:COLUMN, got {location!r}", param_hint="LOCATION"
        ) from None


def _open_project(config: ProjectConfig, root: str, location: str):
    path, line, column = _parse_location(location)
    project = Project(config)
    asyncio.run(load_directory(project, root))
    offset = project.get_offset(path, line, column)
    node = project.get_identifier_at(path, offset)
    return project, node


def _fail(error: Exception):
    classified = classify_error(error)
    log.error("command_failed", category=classified.category.value, error=classified.message)
    console.print(f"[red]✗ {escape(classified.message)}[/]")
    if classified.suggestion:
        console.print(f"[dim]{escape(classified.suggestion)}[/dim]")
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", "config_path", type=click.Path(), help="Path to reforge.toml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path: str = None, verbose: bool = False):
    """reforge - cross-file symbol renaming"""
    config = ProjectConfig.load(config_path)
    setup_logging(
        level="DEBUG" if verbose else config.log_level,
        log_file=config.log_file,
        json_format=config.json_logs,
    )
    ctx.obj = config


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.argument("location")
@click.pass_obj
def refs(config: ProjectConfig, root: str, location: str):
    """List references to the symbol at LOCATION (FILE:LINE:COLUMN)."""
    bind_command("refs", root=root, location=location)
    try:
        project, node = _open_project(config, root, location)
        references = project.find_references(node)
    except (ReforgeError, OSError, UnicodeError) as e:
        _fail(e)

    table = Table(title=f"References to '{node.get_name()}'", show_header=True)
    table.add_column("File", style="cyan")
    table.add_column("Line", justify="right", style="green")
    table.add_column("Column", justify="right", style="green")

    for ref in sorted(set(references), key=lambda r: (r.path, r.span.start)):
        line, column = project.get_position(ref.path, ref.span.start)
        table.add_row(ref.path, str(line), str(column))

    console.print(table)
    console.print(f"\n[dim]Total references: {len(set(references))}[/dim]")


@cli.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.argument("location")
@click.argument("new_name")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing files")
@click.pass_obj
def rename(config: ProjectConfig, root: str, location: str, new_name: str, dry_run: bool):
    """Rename the symbol at LOCATION (FILE:LINE:COLUMN) to NEW_NAME."""
    bind_command("rename", root=root, location=location, dry_run=dry_run)
    try:
        project, node = _open_project(config, root, location)
        old_name = node.get_name()
        batches = project.rename(node, new_name)
        if not dry_run:
            asyncio.run(save_files(project, Path(root), [b.path for b in batches]))
    except (ReforgeError, OSError, UnicodeError) as e:
        _fail(e)

    action = "Would rename" if dry_run else "Renamed"
    occurrences = sum(len(b.spans) for b in batches)
    console.print(f"[green]✓ {action} '{old_name}' → '{new_name}'[/]")
    for batch in batches:
        console.print(f"  {batch.path}: {len(batch.spans)} occurrence(s)")
    console.print(
        f"\n[dim]Total: {occurrences} occurrence(s) in {len(batches)} file(s)[/dim]"
    )


if __name__ == "__main__":
    cli()
