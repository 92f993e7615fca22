"""CLI for Glide.

Provides the command-line interface for breaking tasks into flows and
working through their steps.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

import click

from .breakdown import BreakdownError, TaskBreakdownOrchestrator, cleanup_sdk_child_processes
from .cli_init import init_command
from .clients import create_llm_client
from .database import FlowDB, FlowNotFoundError, StepNotFoundError, StorageError
from .flow_coordinator import FlowMutationCoordinator
from .models import Flow, FlowStats, Step
from .project_config import ProjectConfig, resolve_db_for_cli

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """Glide - Break overwhelming tasks into small, doable steps."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


cli.add_command(init_command)


def _resolve(db: str | None) -> tuple[Path, ProjectConfig | None]:
    """Resolve the database path, exiting with a message on failure."""
    try:
        return resolve_db_for_cli(db)
    except (FileNotFoundError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _run(coro: Coroutine[Any, Any, None]) -> None:
    """Run a command coroutine, reporting domain errors and exiting non-zero."""
    try:
        asyncio.run(coro)
    except (BreakdownError, StorageError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _print_step(step: Step) -> None:
    mark = "x" if step.is_completed else " "
    click.echo(f"  [{mark}] {step.step_number}. {step.title} (⏳ {step.time_estimate})")
    for line in step.description.splitlines():
        click.echo(f"        {line}")
    click.echo(f"        Done when: {step.completion_cue}")
    click.echo(f"        id: {step.id}")


def _print_flow(flow: Flow, steps: list[Step], stats: FlowStats) -> None:
    click.echo("")
    click.echo(flow.title)
    click.echo("=" * max(len(flow.title), 20))
    click.echo(f"id: {flow.id}")
    click.echo(
        f"Progress: {stats.completed_steps}/{stats.total_steps} "
        f"({stats.completion_percentage}%)"
    )
    click.echo("")
    for step in steps:
        _print_step(step)


# =============================================================================
# Flow Commands
# =============================================================================


@cli.command("new")
@click.argument("task")
@click.option("--stream/--no-stream", default=None, help="Stream the model's response as it arrives")
@click.option("--mock-llm", is_flag=True, help="Use canned responses instead of Claude")
@click.option("--db", type=click.Path(), help="Database path")
def new_command(task: str, stream: bool | None, mock_llm: bool, db: str | None) -> None:
    """Break TASK down into a new flow."""
    if not task.strip():
        click.echo("Error: task must not be empty", err=True)
        sys.exit(1)

    db_path, config = _resolve(db)
    config = config or ProjectConfig(name="glide")
    use_stream = config.breakdown.stream if stream is None else stream
    provider = "mock" if mock_llm else config.llm.provider

    _run(_new_async(db_path, config, provider, task, use_stream))


async def _new_async(
    db_path: Path,
    config: ProjectConfig,
    provider: str,
    task: str,
    stream: bool,
) -> None:
    client = create_llm_client(provider, config.llm.max_turns)
    orchestrator = TaskBreakdownOrchestrator(client, config.breakdown)

    def on_chunk(chunk: str) -> None:
        click.echo(chunk, nl=False)

    async with FlowDB(db_path) as db:
        coordinator = FlowMutationCoordinator(db, orchestrator)
        flow = await coordinator.create_flow(
            task, on_progress=click.echo, stream=stream, on_chunk=on_chunk
        )
        if stream:
            click.echo("")
        _print_flow(flow, await db.get_steps(flow.id), await db.get_flow_stats(flow.id))


@cli.command("list")
@click.option("--db", type=click.Path(), help="Database path")
def list_command(db: str | None) -> None:
    """List all flows, newest first."""
    db_path, _ = _resolve(db)
    _run(_list_async(db_path))


async def _list_async(db_path: Path) -> None:
    async with FlowDB(db_path) as db:
        flows = await db.list_flows()
        if not flows:
            click.echo('No flows yet. Create one with: glide new "your task"')
            return
        for flow in flows:
            stats = await db.get_flow_stats(flow.id)
            click.echo(
                f"{flow.id}  {flow.title}  "
                f"[{stats.completed_steps}/{stats.total_steps} done]"
            )


@cli.command("show")
@click.argument("flow_id")
@click.option("--db", type=click.Path(), help="Database path")
def show_command(flow_id: str, db: str | None) -> None:
    """Show a flow and its steps."""
    db_path, _ = _resolve(db)
    _run(_show_async(db_path, flow_id))


async def _show_async(db_path: Path, flow_id: str) -> None:
    async with FlowDB(db_path) as db:
        flow = await db.get_flow(flow_id)
        if flow is None:
            raise FlowNotFoundError(f"Flow not found: {flow_id}")
        _print_flow(flow, await db.get_steps(flow.id), await db.get_flow_stats(flow.id))


@cli.command("rename")
@click.argument("flow_id")
@click.argument("title")
@click.option("--db", type=click.Path(), help="Database path")
def rename_command(flow_id: str, title: str, db: str | None) -> None:
    """Rename a flow."""
    db_path, _ = _resolve(db)
    _run(_rename_async(db_path, flow_id, title))


async def _rename_async(db_path: Path, flow_id: str, title: str) -> None:
    async with FlowDB(db_path) as db:
        flow = await db.update_flow_title(flow_id, title)
        if flow is None:
            raise FlowNotFoundError(f"Flow not found: {flow_id}")
        click.echo(f"Renamed flow {flow.id} to '{flow.title}'")


@cli.command("delete")
@click.argument("flow_id")
@click.option("--db", type=click.Path(), help="Database path")
@click.confirmation_option(prompt="Delete this flow and all of its steps?")
def delete_command(flow_id: str, db: str | None) -> None:
    """Delete a flow and all of its steps."""
    db_path, _ = _resolve(db)
    _run(_delete_async(db_path, flow_id))


async def _delete_async(db_path: Path, flow_id: str) -> None:
    async with FlowDB(db_path) as db:
        if not await db.delete_flow(flow_id):
            raise FlowNotFoundError(f"Flow not found: {flow_id}")
        click.echo(f"Deleted flow {flow_id}")


# =============================================================================
# Step Commands
# =============================================================================


@cli.command("split")
@click.argument("step_id")
@click.option("--mock-llm", is_flag=True, help="Use canned responses instead of Claude")
@click.option("--db", type=click.Path(), help="Database path")
def split_command(step_id: str, mock_llm: bool, db: str | None) -> None:
    """Split a step into two smaller steps."""
    db_path, config = _resolve(db)
    config = config or ProjectConfig(name="glide")
    provider = "mock" if mock_llm else config.llm.provider
    _run(_split_async(db_path, config, provider, step_id))


async def _split_async(db_path: Path, config: ProjectConfig, provider: str, step_id: str) -> None:
    client = create_llm_client(provider, config.llm.max_turns)
    orchestrator = TaskBreakdownOrchestrator(client, config.breakdown)

    async with FlowDB(db_path) as db:
        coordinator = FlowMutationCoordinator(db, orchestrator)
        first, second = await coordinator.split_step(step_id, on_progress=click.echo)
        click.echo("")
        _print_step(first)
        _print_step(second)


@cli.command("done")
@click.argument("step_id")
@click.option("--undo", is_flag=True, help="Mark the step as not completed")
@click.option("--db", type=click.Path(), help="Database path")
def done_command(step_id: str, undo: bool, db: str | None) -> None:
    """Mark a step as completed."""
    db_path, _ = _resolve(db)
    _run(_done_async(db_path, step_id, not undo))


async def _done_async(db_path: Path, step_id: str, is_completed: bool) -> None:
    async with FlowDB(db_path) as db:
        step = await db.set_step_completion(step_id, is_completed)
        if step is None:
            raise StepNotFoundError(f"Step not found: {step_id}")
        if is_completed:
            click.echo(f"Step {step.step_number} done: {step.completion_cue}")
        else:
            click.echo(f"Step {step.step_number} marked as not completed")


# =============================================================================
# Server
# =============================================================================


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8420, type=int, help="Port to bind to")
@click.option("--db", type=click.Path(), help="Database path")
@click.option("--reload", is_flag=True, help="Enable auto-reload on code changes")
@click.option("--log-level", default="info", help="Log level")
def serve(host: str, port: int, db: str | None, reload: bool, log_level: str) -> None:
    """Start the Glide API server."""
    db_path, _ = _resolve(db)

    from .api.serve import run_server

    run_server(
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
        db_path=str(db_path),
    )


def main() -> None:
    """Entry point for CLI."""
    try:
        cli()
    finally:
        cleanup_sdk_child_processes()


if __name__ == "__main__":
    main()
