"""Command-line interface for Task Hub."""

import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.markup import escape

from ..config import get_config, load_config, save_config
from ..hub import TaskHub
from ..mutation import LineMismatch, TaskField, parse_task_field, suggest_values
from ..query_engine import ALL, QueryParams, QuickDateFilter, SortKey, parse_quick_filter, parse_sort_key
from ..storage import DocumentError
from ..task import Priority, Task, TaskStatus
from ..theme import (
    format_count_header,
    format_task_main_row,
    format_task_meta_row,
    get_themed_console,
)
from ..utils.datetime import local_today
from ..watcher import VaultWatcher

STATUS_CHOICES = [ALL] + [s.value for s in TaskStatus]
PRIORITY_CHOICES = [ALL] + [p.value for p in Priority]
QUICK_CHOICES = [q.value for q in QuickDateFilter]
SORT_CHOICES = [k.value for k in SortKey]


def get_console():
    """Get a themed console."""
    return get_themed_console()


def get_hub(ctx: click.Context) -> TaskHub:
    """Get the TaskHub for this invocation, creating it on first use."""
    if ctx.obj.get('hub') is None:
        config = get_config()
        if ctx.obj.get('vault'):
            config.vault_dir = ctx.obj['vault']
        ctx.obj['hub'] = TaskHub(config)
    return ctx.obj['hub']


def parse_location(location: str) -> Tuple[str, int]:
    """Split a ``path:line`` task location."""
    document_id, sep, line = location.rpartition(":")
    if not sep or not document_id or not line.isdigit() or int(line) < 1:
        raise click.BadParameter(f"Expected PATH:LINE, got '{location}'", param_hint="LOCATION")
    return document_id, int(line)


def render_tasks(console, tasks: List[Task], show_file_path: bool) -> None:
    """Print a task list with badges and meta rows."""
    today = local_today()
    console.print(format_count_header(len(tasks)))

    if not tasks:
        console.print("[warning]No tasks match the current filters.[/warning]")
        return

    for task in tasks:
        console.print(format_task_main_row(task))
        meta = format_task_meta_row(task, today, show_file_path=show_file_path)
        if meta:
            console.print(f"    {meta}")


def build_params(hub: TaskHub, status, priority, quick, sort, due_only) -> QueryParams:
    """Merge command line options over the configured defaults."""
    params = hub.default_params()
    changes = {}
    if status:
        changes['status'] = status
    if priority:
        changes['priority'] = priority
    if quick:
        changes['quick'] = parse_quick_filter(quick)
    if sort:
        changes['sort'] = parse_sort_key(sort)
    if due_only is not None:
        changes['due_only'] = due_only
    return params.with_changes(**changes)


def fail(message: str) -> None:
    get_console().print(f"[error]❌ {escape(message)}[/error]")
    sys.exit(1)


@click.group()
@click.option("--config", type=click.Path(dir_okay=False), help="Path to config file")
@click.option("--vault", type=click.Path(file_okay=False), help="Vault directory (overrides config)")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def cli(ctx, config, vault, verbose):
    """Task Hub - checklist tasks across a markdown vault."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['vault'] = vault

    try:
        loaded = load_config(Path(config) if config else None)
    except Exception as e:
        get_console().print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, loaded.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("list")
@click.option("--status", "-s", type=click.Choice(STATUS_CHOICES), help="Filter by status")
@click.option("--priority", "-p", type=click.Choice(PRIORITY_CHOICES), help="Filter by priority")
@click.option("--quick", "-q", type=click.Choice(QUICK_CHOICES, case_sensitive=False),
              help="Quick due-date filter")
@click.option("--sort", type=click.Choice(SORT_CHOICES, case_sensitive=False), help="Sort key")
@click.option("--due-only/--all-tasks", default=None, help="Only tasks with a @due(...) date")
@click.option("--show-path/--hide-path", default=None, help="Show the file path under each task")
@click.pass_context
def list_tasks(ctx, status, priority, quick, sort, due_only, show_path):
    """List tasks from every document in the vault."""
    hub = get_hub(ctx)
    params = build_params(hub, status, priority, quick, sort, due_only)
    tasks = hub.query(hub.scan_all(), params)

    show_file_path = hub.config.show_file_path if show_path is None else show_path
    render_tasks(get_console(), tasks, show_file_path)


@cli.command()
@click.argument("location")
@click.pass_context
def show(ctx, location):
    """Show every field of the task at PATH:LINE."""
    hub = get_hub(ctx)
    document_id, line_number = parse_location(location)
    task = hub.find_task(document_id, line_number)
    if task is None:
        fail(f"No task at {location}")

    console = get_console()
    console.print(format_task_main_row(task))
    for key, value in task.to_dict().items():
        if key in ("text", "status", "priority"):
            continue
        console.print(f"  [muted]{key}:[/muted] {escape(str(value))}")
    ref = hub.storage.get_document(document_id)
    console.print(f"  [muted]file:[/muted] {escape(str(ref.path))}:{line_number}")


def _change_field(ctx, location: str, field: TaskField, value) -> None:
    hub = get_hub(ctx)
    document_id, line_number = parse_location(location)
    task = hub.find_task(document_id, line_number)
    if task is None:
        fail(f"No task at {location}")

    if isinstance(value, str):
        for suggestion in suggest_values(field, value):
            get_console().print(f"[warning]'{escape(value)}' is not a standard {field.value}; did you mean '{suggestion}'?[/warning]")

    try:
        new_line = hub.apply_field_change(task, field, value)
    except LineMismatch as e:
        fail(f"{location} changed since the last scan: {e}")
    except (DocumentError, ValueError) as e:
        fail(str(e))

    get_console().print(f"[success]✅ Updated {location}[/success]")
    get_console().print(new_line, markup=False)


@cli.command("set")
@click.argument("location")
@click.argument("field")
@click.argument("value", required=False, default="")
@click.pass_context
def set_field(ctx, location, field, value):
    """Set FIELD of the task at PATH:LINE (empty VALUE removes it).

    FIELD is one of text, created, due, closed, status, priority, project,
    people (comma separated).
    """
    try:
        task_field = parse_task_field(field)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="FIELD")
    _change_field(ctx, location, task_field, value)


@cli.command()
@click.argument("location")
@click.pass_context
def done(ctx, location):
    """Mark the task at PATH:LINE complete."""
    _change_field(ctx, location, TaskField.STATUS, TaskStatus.COMPLETE.value)


@cli.command()
@click.argument("location")
@click.pass_context
def cancel(ctx, location):
    """Mark the task at PATH:LINE canceled."""
    _change_field(ctx, location, TaskField.STATUS, TaskStatus.CANCELED.value)


@cli.command()
@click.argument("location")
@click.pass_context
def reopen(ctx, location):
    """Mark the task at PATH:LINE open again."""
    _change_field(ctx, location, TaskField.STATUS, TaskStatus.OPEN.value)


@cli.command()
@click.option("--status", "-s", type=click.Choice(STATUS_CHOICES), help="Filter by status")
@click.option("--priority", "-p", type=click.Choice(PRIORITY_CHOICES), help="Filter by priority")
@click.option("--quick", "-q", type=click.Choice(QUICK_CHOICES, case_sensitive=False),
              help="Quick due-date filter")
@click.option("--sort", type=click.Choice(SORT_CHOICES, case_sensitive=False), help="Sort key")
@click.pass_context
def watch(ctx, status, priority, quick, sort):
    """Re-list tasks whenever a markdown document changes."""
    hub = get_hub(ctx)
    params = build_params(hub, status, priority, quick, sort, None)
    console = get_console()

    def on_refresh(tasks: List[Task]) -> None:
        console.clear()
        render_tasks(console, hub.query(tasks, params), hub.config.show_file_path)

    hub.store.on_refresh = on_refresh
    hub.scan_all()

    with VaultWatcher(hub.store):
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            console.print("[muted]Stopped watching.[/muted]")


@cli.group("config")
def config_group():
    """Show or change settings."""


@config_group.command("show")
def config_show():
    """Print the current configuration as YAML."""
    get_console().print(get_config().to_yaml(), markup=False)


@config_group.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key, value):
    """Set a configuration KEY to VALUE and save it."""
    config = get_config()
    try:
        config.set_value(key, value)
    except (KeyError, ValueError) as e:
        fail(str(e).strip("'\""))
    path = save_config(config)
    get_console().print(f"[success]✅ {key} = {getattr(config, key)!r} saved to {path}[/success]")


def main(args: Optional[List[str]] = None):
    """Main entry point for the Task Hub CLI."""
    cli(args=args, obj={})


if __name__ == "__main__":
    main()
