"""Command-line interface for todo-sync."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from todo_sync import __version__
from todo_sync.config import Config
from todo_sync.exceptions import ConfigurationError, TodoSyncError
from todo_sync.models import ApplyPolicy, DeltaResult
from todo_sync.stores import ItemStore, RemoteTodoClient, YamlItemStore
from todo_sync.sync import DeltaEngine, SyncEngine, SyncLedger
from todo_sync.utils import setup_logging

app = typer.Typer(help="Push local todo changes to a remote todo service")
console = Console()
logger = logging.getLogger(__name__)

CONFIG_DIR_OPTION = typer.Option(
    None,
    "--config-dir",
    help="Configuration directory. Defaults to ~/.todo-sync/",
)


def _parse_since(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        console.print("[red]Invalid date format. Use ISO 8601, e.g. 2024-01-31T18:00[/red]")
        raise typer.Exit(code=1)


def _open_target(config: Config) -> ItemStore:
    """Create the store changes are pushed to.

    Raises:
        ConfigurationError: If neither a remote URL nor a mirror file is configured.
    """
    if config.remote_url:
        return RemoteTodoClient(
            base_url=config.remote_url,
            api_token=config.storage.get_token("remote"),
        )
    if config.mirror_path:
        return YamlItemStore(config.mirror_path)
    raise ConfigurationError("No remote service or mirror file configured")


def _delta_table(delta: DeltaResult, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Change", style="cyan")
    table.add_column("App ID", style="magenta")
    table.add_column("Mapped ID", style="green")
    table.add_column("Summary")

    for item in delta.new_items:
        table.add_row("NEW", item.app_id, "-", item.summary)
    for item in delta.modified_items:
        table.add_row("MODIFIED", item.app_id, str(item.mapped_id), item.summary)
    for mapped_id in delta.deleted_ids:
        table.add_row("DELETED", "-", str(mapped_id), "")
    return table


@app.command()
def sync(
    since: Optional[str] = typer.Option(
        None,
        "--since",
        help="Cutoff (ISO 8601). Defaults to the last successful sync.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be pushed without changing anything.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """Push new, modified and deleted todos to the target store."""
    log_file = setup_logging(
        log_level=logging.DEBUG if verbose else logging.INFO,
        config_dir=config_dir,
    )
    logger.info(f"todo-sync v{__version__}")

    since_dt = _parse_since(since)

    try:
        config = Config(config_dir)
        local_store = YamlItemStore(config.store_path)
        target = _open_target(config)
    except ConfigurationError as e:
        console.print(f"[yellow]{e}. Run: todo-sync configure[/yellow]")
        raise typer.Exit(code=1)
    except TodoSyncError as e:
        logger.error(f"Initialization failed: {e}", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    try:
        engine = SyncEngine(config=config, local_store=local_store, target_store=target)

        mode_str = "[bold cyan]DRY RUN[/bold cyan]" if dry_run else "[bold green]SYNC[/bold green]"
        console.print(f"Starting {mode_str} mode...")

        result = engine.sync(since=since_dt, dry_run=dry_run)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1)
    finally:
        if isinstance(target, RemoteTodoClient):
            target.close()

    if dry_run and result.delta is not None:
        console.print(_delta_table(result.delta, "Pending Changes"))

    table = Table(title="Sync Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")
    table.add_row("Added", str(result.entries_added))
    table.add_row("Modified", str(result.entries_modified))
    table.add_row("Deleted", str(result.entries_deleted))
    table.add_row("Skipped", str(result.entries_skipped))
    table.add_row("Failed", str(result.entries_failed))
    console.print(table)

    if result.ledger_partial:
        console.print(
            "[yellow]The ledger was truncated; some deletions may be pushed next time.[/yellow]"
        )

    if result.errors:
        console.print("\n[red]Errors:[/red]")
        for error in result.errors:
            console.print(f"  - {error}")
        console.print(f"See {log_file} for details.")

    raise typer.Exit(code=0 if result.ok else 1)


@app.command()
def configure(config_dir: Optional[Path] = CONFIG_DIR_OPTION) -> None:
    """Configure the local todo file and the target store."""
    setup_logging(config_dir=config_dir)
    config = Config(config_dir)

    console.print("[bold cyan]todo-sync Configuration[/bold cyan]")
    console.print()

    store_path = Prompt.ask(
        "Local todo file",
        default=str(config.get_config().get("store_path") or config.storage.config_dir / "todos.yaml"),
    )
    config.update("store_path", store_path)

    target = Prompt.ask("Push changes to", choices=["remote", "mirror"], default="remote")
    if target == "remote":
        if config.remote_url:
            base_url = Prompt.ask("Remote todo service URL", default=config.remote_url)
        else:
            base_url = Prompt.ask("Remote todo service URL")
        config.set_remote_url(base_url.strip())
        config.update("mirror_path", None)
        token = Prompt.ask("API token (leave empty for none)", password=True, default="")
        if token:
            config.storage.set_token("remote", token)
    else:
        mirror_path = Prompt.ask("Mirror todo file")
        config.update("mirror_path", mirror_path)
        config.update("remote", None)

    policy = Prompt.ask(
        "When an item fails to push",
        choices=[p.value for p in ApplyPolicy],
        default=config.get_config().get("apply_policy", ApplyPolicy.BEST_EFFORT.value),
    )
    config.update("apply_policy", policy)

    console.print("\n[green]Configuration complete![/green]")
    console.print("Run 'todo-sync sync' to push your todos.")


@app.command()
def status(config_dir: Optional[Path] = CONFIG_DIR_OPTION) -> None:
    """Show the last sync time, the ledger and pending changes."""
    setup_logging(config_dir=config_dir)
    config = Config(config_dir)

    last_sync = config.storage.get_last_sync_date()
    loaded = SyncLedger(config.ledger_path).load()

    console.print(f"Last sync:   {last_sync.isoformat() if last_sync else '[yellow]never[/yellow]'}")
    console.print(f"Todo file:   {config.store_path}")
    console.print(f"Ledger:      {config.ledger_path} ({len(loaded.ids)} IDs)")
    if loaded.is_partial:
        console.print(
            f"[yellow]Ledger declares {loaded.declared_count} IDs, "
            f"only {loaded.read_count} present[/yellow]"
        )

    try:
        local_store = YamlItemStore(config.store_path)
    except TodoSyncError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    delta = DeltaEngine().compute_delta(local_store.list_items(), last_sync, loaded.ids)
    if delta.is_empty:
        console.print("[green]Nothing to sync.[/green]")
    else:
        console.print(_delta_table(delta, "Pending Changes"))


@app.command("reset-ledger")
def reset_ledger(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
    config_dir: Optional[Path] = CONFIG_DIR_OPTION,
) -> None:
    """Forget the ledger and last sync time so the next sync starts over."""
    setup_logging(config_dir=config_dir)
    config = Config(config_dir)

    if not yes and not Confirm.ask("Forget all sync history?", default=False):
        raise typer.Exit(code=0)

    SyncLedger(config.ledger_path).clear()
    config.storage.clear_last_sync_date()
    console.print("[green]Sync history cleared.[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"todo-sync v{__version__}")


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        console.print(f"[red]Unexpected error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
