"""CLI init command for Glide.

Provides the top-level `init` command that bootstraps a .glide/ directory
with config.toml, .gitignore, and a per-project flow database.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from .database import FlowDB
from .project_config import create_default_config


@click.command("init")
@click.option(
    "--project",
    "-p",
    "project_path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Path to the project directory (default: current directory)",
)
@click.option(
    "--name",
    "-n",
    default=None,
    help="Project name (defaults to directory name)",
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing .glide/ configuration",
)
def init_command(project_path: str, name: str | None, force: bool) -> None:
    """Initialize a project for Glide.

    Creates a .glide/ directory with config.toml, .gitignore,
    and an empty flow database.
    """
    path = Path(project_path)

    try:
        config = create_default_config(path, name=name, force=force)
    except FileExistsError:
        click.echo(
            f"Error: Project already initialized at {path / '.glide'}. "
            "Use --force to overwrite.",
            err=True,
        )
        sys.exit(1)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    db_path = config.resolve_db_path(path)
    asyncio.run(_init_db(db_path))

    click.echo(f"Initialized Glide project '{config.name}' at {path}")
    click.echo(f"  Config: {path / '.glide' / 'config.toml'}")
    click.echo(f"  Database: {db_path}")
    click.echo("")
    click.echo("Next steps:")
    click.echo('  glide new "the task you keep putting off"')


async def _init_db(db_path: str | Path) -> None:
    """Initialize the project database."""
    db = FlowDB(db_path)
    await db.connect()
    await db.close()
