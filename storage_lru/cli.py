"""CLI for inspecting and driving a file-backed storage-lru cache."""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from storage_lru.consts import DEFAULT_DATA_DIR_ENV, DEFAULT_DATA_DIR_NAME
from storage_lru.engine import StorageLRU
from storage_lru.errors import StorageLRUError
from storage_lru.models.common import now_in_sec
from storage_lru.models.model_meta import MetaRecord
from storage_lru.storage.file_storage import FileStorage
from storage_lru.storage.sync_wrapper import SyncWrapper

app = typer.Typer(
    name="storage-lru",
    help="storage-lru - Expiring, self-purging cache over a directory of records",
)

console = Console()

DataDirOption = typer.Option(
    Path.cwd() / DEFAULT_DATA_DIR_NAME,
    "--dir",
    "-d",
    envvar=DEFAULT_DATA_DIR_ENV,
    help="Directory holding the cache records",
)
PrefixOption = typer.Option("", "--prefix", "-p", help="Key prefix (cache namespace)")
MaxCharsOption = typer.Option(None, "--max-chars", help="Storage quota in characters")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _open_cache(data_dir: Path, prefix: str, max_chars: int | None) -> StorageLRU:
    storage = SyncWrapper(FileStorage(data_dir, max_chars=max_chars))
    return StorageLRU(storage, key_prefix=prefix)


def _fail(error: StorageLRUError) -> None:
    console.print(f"[red]Error [{int(error.code)}]:[/red] {error.message}")
    raise typer.Exit(1)


def _describe_freshness(record: MetaRecord, now: int) -> str:
    if record.bad:
        return "[red]bad[/red]"
    if record.is_truly_stale(now):
        return "[red]truly stale[/red]"
    if record.is_expired(now):
        return "[yellow]stale[/yellow]"
    return f"[green]fresh ({record.expires - now}s)[/green]"


@app.command("set")
def set_item(
    key: str = typer.Argument(..., help="Item key"),
    value: str = typer.Argument(..., help="Item value (JSON text with --json)"),
    cache_control: str = typer.Option(
        ..., "--cache-control", "-c", help="e.g. 'max-age=300,stale-while-revalidate=600'"
    ),
    priority: int = typer.Option(None, "--priority", help="Purge precedence, 1 is highest"),
    as_json: bool = typer.Option(False, "--json", help="Parse VALUE as JSON and store it as JSON"),
    data_dir: Path = DataDirOption,
    prefix: str = PrefixOption,
    max_chars: int = MaxCharsOption,
    verbose: bool = VerboseOption,
) -> None:
    """Store an item."""
    _configure_logging(verbose)
    if as_json:
        try:
            payload = json.loads(value)
        except json.JSONDecodeError as e:
            console.print(f"[red]Error:[/red] VALUE is not valid JSON: {e}")
            raise typer.Exit(1)
    else:
        payload = value

    async def run() -> None:
        async with _open_cache(data_dir, prefix, max_chars) as cache:
            await cache.set_item(
                key, payload, cache_control, as_json=as_json, priority=priority
            )

    try:
        asyncio.run(run())
    except StorageLRUError as e:
        _fail(e)
    console.print(f"Stored [cyan]{key}[/cyan]")


@app.command("get")
def get_item(
    key: str = typer.Argument(..., help="Item key"),
    as_json: bool = typer.Option(False, "--json", help="Decode the stored value as JSON"),
    data_dir: Path = DataDirOption,
    prefix: str = PrefixOption,
    verbose: bool = VerboseOption,
) -> None:
    """Read an item."""
    _configure_logging(verbose)

    async def run():
        async with _open_cache(data_dir, prefix, None) as cache:
            return await cache.get_item(key, as_json=as_json)

    try:
        result = asyncio.run(run())
    except StorageLRUError as e:
        _fail(e)

    if result is None:
        console.print(f"[yellow]Not found:[/yellow] {key}")
        raise typer.Exit(1)

    if result.is_stale:
        console.print("[yellow](stale)[/yellow]")
    if as_json:
        console.print_json(json.dumps(result.value))
    else:
        console.print(result.value, markup=False, highlight=False)


@app.command("remove")
def remove_item(
    key: str = typer.Argument(..., help="Item key"),
    data_dir: Path = DataDirOption,
    prefix: str = PrefixOption,
    verbose: bool = VerboseOption,
) -> None:
    """Remove an item."""
    _configure_logging(verbose)

    async def run() -> None:
        async with _open_cache(data_dir, prefix, None) as cache:
            await cache.remove_item(key)

    try:
        asyncio.run(run())
    except StorageLRUError as e:
        _fail(e)
    console.print(f"Removed [cyan]{key}[/cyan]")


@app.command("keys")
def list_keys(
    limit: int = typer.Option(100, "--limit", "-l", help="Number of backend keys to scan"),
    data_dir: Path = DataDirOption,
    prefix: str = PrefixOption,
    verbose: bool = VerboseOption,
) -> None:
    """List item keys."""
    _configure_logging(verbose)

    async def run() -> list[str]:
        async with _open_cache(data_dir, prefix, None) as cache:
            return await cache.keys(limit)

    keys = asyncio.run(run())
    if not keys:
        console.print("[yellow]No items found.[/yellow]")
        return
    for key in keys:
        console.print(key, markup=False, highlight=False)


@app.command("purge")
def purge(
    space: int = typer.Argument(..., help="Characters of space needed"),
    data_dir: Path = DataDirOption,
    prefix: str = PrefixOption,
    purge_factor: float = typer.Option(1.0, "--purge-factor", help="Extra space, as a multiple"),
    verbose: bool = VerboseOption,
) -> None:
    """Evict items to free space."""
    _configure_logging(verbose)
    purged: list[str] = []

    async def run() -> None:
        storage = SyncWrapper(FileStorage(data_dir))
        async with StorageLRU(
            storage, key_prefix=prefix, purge_factor=purge_factor, purged_fn=purged.extend
        ) as cache:
            await cache.purge(space)

    try:
        asyncio.run(run())
    except StorageLRUError as e:
        console.print(f"Purged {len(purged)} items")
        _fail(e)

    console.print(f"[bold green]Purged {len(purged)} items[/bold green]")
    for key in purged:
        console.print(f"  {key}", markup=False, highlight=False)


@app.command("stats")
def stats(
    limit: int = typer.Option(1000, "--limit", "-l", help="Number of backend keys to index"),
    data_dir: Path = DataDirOption,
    prefix: str = PrefixOption,
    verbose: bool = VerboseOption,
) -> None:
    """Show disk usage and per-item metadata."""
    _configure_logging(verbose)

    async def run():
        async with _open_cache(data_dir, prefix, None) as cache:
            await cache.load_index(limit)
            return cache.stats(du=True), cache.index.records()

    snapshot, records = asyncio.run(run())
    now = now_in_sec()

    table = Table(title=f"Cache items ({snapshot.du.count} items, {snapshot.du.size} chars)")
    table.add_column("Key", style="cyan")
    table.add_column("Priority", justify="right")
    table.add_column("Freshness")
    table.add_column("Stale window", justify="right", style="dim")
    table.add_column("Last access", justify="right", style="dim")
    table.add_column("Size", justify="right", style="magenta")

    for record in records:
        key = record.key[len(prefix) :]
        if record.bad:
            table.add_row(key, "-", _describe_freshness(record, now), "-", "-", str(record.size))
            continue
        table.add_row(
            key,
            str(record.priority),
            _describe_freshness(record, now),
            f"{record.stale}s",
            f"{now - record.access}s ago",
            str(record.size),
        )

    console.print(table)


if __name__ == "__main__":
    app()
