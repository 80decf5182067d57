"""CLI entry point for the corpus sync engine.

Provides commands:
  - sync: Reconcile the documents directory into the remote store
  - status: Completeness of the store against the target corpus size
  - retry: Re-upload specific files with patient retry settings
  - diagnose: Inspect files that failed to upload
  - ask: Query the store (thin pass-through)
  - delete: Force-delete a store and its ledger entry
  - stores: List, de-duplicate or purge remote stores
  - ledger: Show, verify or de-duplicate the local upload ledger
  - config: Manage the Gemini API key
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ragsync.config import (
    SERVICE_NAME,
    get_api_key,
    get_keyring_api_key,
    load_sync_config,
    remove_keyring_api_key,
    set_keyring_api_key,
)
from ragsync.exceptions import RagSyncError
from ragsync.models import SyncConfig, SyncOptions, SyncResult, UploadConfig
from ragsync.upload.ledger import UploadLedger

if TYPE_CHECKING:
    from ragsync.sync.orchestrator import SyncOrchestrator
    from ragsync.upload.client import GeminiStoreClient

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

app = typer.Typer(
    help="ragsync - keep a document corpus in sync with a Gemini File Search store",
    rich_markup_mode="rich",
)
console = Console()

stores_app = typer.Typer(help="Inspect and clean up remote stores")
app.add_typer(stores_app, name="stores")

ledger_app = typer.Typer(help="Inspect and repair the local upload ledger")
app.add_typer(ledger_app, name="ledger")

config_app = typer.Typer(help="Manage configuration (API key)")
app.add_typer(config_app, name="config")


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """Configure root logging; optionally mirror ``ragsync`` logs to a file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger("ragsync").addHandler(fh)


@app.callback()
def app_callback(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to sync_config.json"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option("--log-file", help="Also write logs to this file"),
    ] = None,
) -> None:
    """Load configuration and set up logging for every command."""
    setup_logging(verbose, log_file)
    try:
        ctx.obj = load_sync_config(config_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] Cannot load config: {e}")
        raise typer.Exit(code=1)


def get_config(ctx: typer.Context) -> SyncConfig:
    """Type-safe accessor for the SyncConfig loaded by the callback."""
    if ctx.obj is None:
        ctx.obj = load_sync_config()
    return ctx.obj


def _make_client(cfg: SyncConfig) -> GeminiStoreClient:
    try:
        api_key = get_api_key()
    except RuntimeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    # Deferred for fast CLI startup
    from ragsync.upload.client import GeminiStoreClient

    return GeminiStoreClient(api_key=api_key, model=cfg.model)


def _make_orchestrator(
    cfg: SyncConfig,
    client: GeminiStoreClient,
) -> SyncOrchestrator:
    from ragsync.sync.orchestrator import SyncOrchestrator
    from ragsync.sync.stores import RemoteStoreDirectory
    from ragsync.upload.uploader import DocumentUploader

    ledger = UploadLedger(cfg.ledger_path)
    return SyncOrchestrator(
        directory=RemoteStoreDirectory(client, ledger),
        uploader=DocumentUploader(client, cfg.upload),
        ledger=ledger,
        target_count=cfg.target_count,
    )


def _print_result(result: SyncResult, title: str) -> None:
    table = Table(title=title)
    table.add_column("Outcome", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("Uploaded", f"[green]{len(result.successful)}[/green]")
    table.add_row("Failed", f"[red]{len(result.failed)}[/red]" if result.failed else "0")
    table.add_row("Skipped (duplicate name)", str(len(result.skipped_duplicates)))
    table.add_row("Skipped (already uploaded)", str(len(result.skipped_already_uploaded)))
    if result.skipped_in_session:
        table.add_row("Skipped (handled this run)", str(len(result.skipped_in_session)))

    docs = f"{result.document_count}"
    if result.target_count:
        docs += f" / {result.target_count}"
    mode = "cached" if result.cached else ("new store" if result.is_new else "existing store")
    if result.resume_mode:
        mode += ", resume"

    console.print(
        Panel(
            f"Store: [bold]{result.store_id}[/bold] ({mode})\nDocuments in store: {docs}",
            title=title,
        )
    )
    console.print(table)

    if result.failed:
        console.print("\n[yellow]Warning:[/yellow] some documents failed to upload:")
        for failure in result.failed:
            console.print(f"  [red]-[/red] {failure.file_name}: {failure.error}")
        console.print(
            "Retry them with [bold]ragsync retry FILE...[/bold] "
            "or inspect them with [bold]ragsync diagnose FILE...[/bold]"
        )


# ----------------------------------------------------------------------
# Sync and status
# ----------------------------------------------------------------------


@app.command()
def sync(
    ctx: typer.Context,
    store_name: Annotated[
        str | None,
        typer.Option("--store", "-s", help="Store display name (default from config)"),
    ] = None,
    documents_dir: Annotated[
        Path | None,
        typer.Option("--dir", "-d", help="Documents directory (default from config)"),
    ] = None,
    force_reload: Annotated[
        bool,
        typer.Option("--force-reload", help="Delete the existing store and re-upload everything"),
    ] = False,
    resume: Annotated[
        bool,
        typer.Option("--resume", help="Upload only documents missing from the ledger"),
    ] = False,
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-r", help="Include sub-directories"),
    ] = False,
) -> None:
    """Reconcile the documents directory into the remote store.

    Without --force-reload or --resume an existing store is used as-is.

    Examples:
      ragsync sync                      # Create the store on first run
      ragsync sync --resume             # Continue an interrupted upload
      ragsync sync --force-reload       # Rebuild the store from scratch
    """
    from ragsync.upload.progress import SyncProgressTracker

    cfg = get_config(ctx)
    name = store_name or cfg.store_name
    directory = documents_dir or cfg.documents_dir
    options = SyncOptions(
        force_reload=force_reload,
        resume_mode=resume,
        recursive=recursive or cfg.recursive,
    )
    client = _make_client(cfg)

    async def _run() -> SyncResult:
        orchestrator = _make_orchestrator(cfg, client)
        try:
            with SyncProgressTracker(console=console) as tracker:
                return await orchestrator.sync(name, directory, options, on_progress=tracker)
        finally:
            await client.close()

    try:
        result = asyncio.run(_run())
    except (RagSyncError, RuntimeError) as e:
        console.print(f"[red]Sync failed:[/red] {e}")
        raise typer.Exit(code=1)

    _print_result(result, "Sync Summary")


@app.command()
def status(
    ctx: typer.Context,
    store_name: Annotated[
        str | None,
        typer.Option("--store", "-s", help="Store display name (default from config)"),
    ] = None,
) -> None:
    """Show completeness of the store against the target corpus size."""
    cfg = get_config(ctx)
    name = store_name or cfg.store_name
    client = _make_client(cfg)

    async def _run():
        try:
            return await _make_orchestrator(cfg, client).get_status(name)
        finally:
            await client.close()

    try:
        st = asyncio.run(_run())
    except (RagSyncError, RuntimeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if st.store_id is None:
        console.print(f"[yellow]No store found with display name[/yellow] {name}")
        raise typer.Exit(code=1)

    table = Table(title=f"Status: {name}")
    table.add_column("Field", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Store", st.store_id)
    table.add_row("Documents (remote)", str(st.remote_document_count))
    table.add_row("Documents (ledger)", str(st.ledger_document_count))
    table.add_row("Unique ledger entries", str(st.unique_ledger_count))
    table.add_row("Size", f"{st.size_bytes / 1024 / 1024:.2f} MB")
    if st.target_count:
        style = "green" if st.is_complete else "yellow"
        table.add_row(
            "Progress",
            f"[{style}]{st.unique_ledger_count}/{st.target_count} ({st.percent_complete}%)[/{style}]",
        )
    console.print(table)

    if st.has_ledger_duplicates:
        console.print(
            f"[yellow]Warning:[/yellow] ledger holds {st.ledger_duplicate_count} duplicate "
            "entries. Run [bold]ragsync ledger dedupe[/bold]."
        )


@app.command()
def retry(
    ctx: typer.Context,
    files: Annotated[
        list[str],
        typer.Argument(help="File names (relative to the documents directory)"),
    ],
    store_name: Annotated[
        str | None,
        typer.Option("--store", "-s", help="Store display name (default from config)"),
    ] = None,
    documents_dir: Annotated[
        Path | None,
        typer.Option("--dir", "-d", help="Documents directory (default from config)"),
    ] = None,
    patient: Annotated[
        bool,
        typer.Option("--patient/--normal", help="Use extended timeouts and backoff"),
    ] = True,
    delay: Annotated[
        float | None,
        typer.Option("--delay", help="Seconds to wait between files"),
    ] = None,
) -> None:
    """Re-upload specific files into the existing store, one at a time."""
    cfg = get_config(ctx)
    name = store_name or cfg.store_name
    directory = documents_dir or cfg.documents_dir
    upload_config = UploadConfig.patient() if patient else cfg.upload
    inter_file_delay = upload_config.inter_file_delay_seconds if delay is None else delay
    client = _make_client(cfg)

    console.print(
        f"Retrying {len(files)} file(s): max {upload_config.max_retries} attempts, "
        f"{upload_config.max_poll_seconds / 60:.0f} min poll timeout, "
        f"{inter_file_delay:.0f}s between files"
    )

    async def _run() -> SyncResult:
        from ragsync.upload.uploader import DocumentUploader

        orchestrator = _make_orchestrator(cfg, client)
        try:
            return await orchestrator.retry_files(
                name,
                directory,
                files,
                uploader=DocumentUploader(client, upload_config),
                inter_file_delay=inter_file_delay,
            )
        finally:
            await client.close()

    try:
        result = asyncio.run(_run())
    except (RagSyncError, RuntimeError) as e:
        console.print(f"[red]Retry failed:[/red] {e}")
        raise typer.Exit(code=1)

    _print_result(result, "Retry Summary")


@app.command()
def diagnose(
    ctx: typer.Context,
    files: Annotated[
        list[str],
        typer.Argument(help="File names (relative to the documents directory)"),
    ],
    documents_dir: Annotated[
        Path | None,
        typer.Option("--dir", "-d", help="Documents directory (default from config)"),
    ] = None,
) -> None:
    """Inspect files that failed to upload for size and encoding problems."""
    from ragsync.sync.diagnostics import diagnose_files

    cfg = get_config(ctx)
    directory = documents_dir or cfg.documents_dir
    try:
        report = diagnose_files(directory, files)
    except RagSyncError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"Directory: [bold]{escape(str(report.directory))}[/bold]\n"
            f"Files: {report.file_count}  "
            f"Average: {report.average_size / 1024:.2f} KB  "
            f"Largest: {report.max_size / 1024:.2f} KB  "
            f"Smallest: {report.min_size / 1024:.2f} KB",
            title="Corpus",
        )
    )
    for diag in report.files:
        if not diag.exists:
            console.print(f"\n[red]✗[/red] [bold]{escape(diag.file_name)}[/bold]: file not found")
            continue
        console.print(f"\n[bold]{escape(diag.file_name)}[/bold]")
        ratio = f" ({diag.ratio_to_average:.0%} of average)" if diag.ratio_to_average else ""
        console.print(f"  Size: {diag.size_bytes / 1024:.2f} KB{ratio}")
        if diag.readable:
            console.print(f"  Characters: {diag.char_count}  Lines: {diag.line_count}")
            console.print(f"  [dim]Preview: {escape(diag.preview)}...[/dim]")
        for warning in diag.warnings:
            console.print(f"  [yellow]Warning:[/yellow] {escape(warning)}")
        if diag.similar_files:
            console.print("  Similar files: " + escape(", ".join(diag.similar_files)))


@app.command()
def ask(
    ctx: typer.Context,
    question: Annotated[str, typer.Argument(help="Question to answer from the store")],
    store_name: Annotated[
        str | None,
        typer.Option("--store", "-s", help="Store display name (default from config)"),
    ] = None,
) -> None:
    """Ask a question answered from the store's documents."""
    from ragsync.sync.stores import RemoteStoreDirectory

    cfg = get_config(ctx)
    name = store_name or cfg.store_name
    client = _make_client(cfg)

    async def _run():
        try:
            store = await RemoteStoreDirectory(client, UploadLedger(cfg.ledger_path)).resolve_canonical(name)
            if store is None:
                return None
            return await client.query(store.store_id, question)
        finally:
            await client.close()

    try:
        answer = asyncio.run(_run())
    except (RagSyncError, RuntimeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if answer is None:
        console.print(f"[yellow]No store found with display name[/yellow] {name}")
        raise typer.Exit(code=1)

    console.print(Panel(answer.answer_text or "[dim](no answer)[/dim]", title="Answer"))
    for i, ref in enumerate(answer.references, start=1):
        source = ref.file_name or ref.source_title or ref.source_uri or "unknown"
        console.print(f"[dim][{i}][/dim] {source}")


@app.command()
def delete(
    ctx: typer.Context,
    store_id: Annotated[str, typer.Argument(help="Store resource name (fileSearchStores/...)")],
    confirm: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Force-delete a store and clear its ledger entry."""
    from ragsync.sync.stores import RemoteStoreDirectory

    cfg = get_config(ctx)
    if not confirm and not typer.confirm(f"Delete store {store_id} and all its documents?"):
        console.print("[yellow]Delete cancelled.[/yellow]")
        return
    client = _make_client(cfg)

    async def _run() -> None:
        try:
            await RemoteStoreDirectory(client, UploadLedger(cfg.ledger_path)).delete(store_id)
        finally:
            await client.close()

    try:
        asyncio.run(_run())
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to delete {store_id}: {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Deleted {store_id}")


# ----------------------------------------------------------------------
# stores
# ----------------------------------------------------------------------


@stores_app.command("list")
def stores_list(ctx: typer.Context) -> None:
    """List every store, flagging display names held by more than one."""
    from ragsync.sync.maintenance import inspect_stores
    from ragsync.sync.stores import RemoteStoreDirectory

    cfg = get_config(ctx)
    client = _make_client(cfg)

    async def _run():
        try:
            return await inspect_stores(RemoteStoreDirectory(client, UploadLedger(cfg.ledger_path)))
        finally:
            await client.close()

    try:
        inventory = asyncio.run(_run())
    except (RagSyncError, RuntimeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title=f"Stores ({len(inventory.stores)})")
    table.add_column("Display name", style="bold")
    table.add_column("Store")
    table.add_column("Documents", justify="right")
    table.add_column("Size (MB)", justify="right")
    table.add_column("Created")
    duplicates = set(inventory.duplicate_display_names)
    for display_name, group in sorted(inventory.grouped_by_display_name.items()):
        style = "yellow" if display_name in duplicates else ""
        for store in group:
            table.add_row(
                f"[{style}]{display_name}[/{style}]" if style else display_name,
                store.store_id,
                str(store.active_document_count),
                f"{store.size_bytes / 1024 / 1024:.2f}",
                store.create_time or "",
            )
    console.print(table)
    console.print(f"[bold]Total documents:[/bold] {inventory.total_documents}")
    for name in inventory.duplicate_display_names:
        console.print(
            f"[yellow]Warning:[/yellow] {len(inventory.grouped_by_display_name[name])} stores "
            f"named {name!r}. Run [bold]ragsync stores cleanup --store {name}[/bold]."
        )


@stores_app.command("cleanup")
def stores_cleanup(
    ctx: typer.Context,
    store_name: Annotated[
        str | None,
        typer.Option("--store", "-s", help="Store display name (default from config)"),
    ] = None,
) -> None:
    """Delete duplicate stores, keeping the one with the most documents."""
    from ragsync.sync.maintenance import reconcile_stores
    from ragsync.sync.stores import RemoteStoreDirectory

    cfg = get_config(ctx)
    name = store_name or cfg.store_name
    client = _make_client(cfg)

    async def _run():
        try:
            directory = RemoteStoreDirectory(client, UploadLedger(cfg.ledger_path))
            return await reconcile_stores(directory, name)
        finally:
            await client.close()

    try:
        result = asyncio.run(_run())
    except (RagSyncError, RuntimeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if result.found == 0:
        console.print(f"[yellow]No store found with display name[/yellow] {name}")
        return
    console.print(
        f"Found {result.found} store(s); kept [bold]{result.kept}[/bold], "
        f"deleted {result.deleted_count}"
    )
    for store_id in result.failed_ids:
        console.print(f"  [red]Failed to delete[/red] {store_id}")
    if result.failed_ids:
        raise typer.Exit(code=1)


@stores_app.command("purge-all")
def stores_purge_all(
    ctx: typer.Context,
    confirm: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Delete EVERY store visible to the API key."""
    from ragsync.sync.maintenance import purge_all_stores
    from ragsync.sync.stores import RemoteStoreDirectory

    cfg = get_config(ctx)
    if not confirm and not typer.confirm("Delete ALL stores and their documents?"):
        console.print("[yellow]Purge cancelled.[/yellow]")
        return
    client = _make_client(cfg)

    async def _run():
        try:
            return await purge_all_stores(RemoteStoreDirectory(client, UploadLedger(cfg.ledger_path)))
        finally:
            await client.close()

    try:
        deleted, failed = asyncio.run(_run())
    except (RagSyncError, RuntimeError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]Deleted {len(deleted)} store(s).[/green]")
    for store_id in failed:
        console.print(f"  [red]Failed to delete[/red] {store_id}")
    if failed:
        raise typer.Exit(code=1)


# ----------------------------------------------------------------------
# ledger
# ----------------------------------------------------------------------


@ledger_app.command("show")
def ledger_show(ctx: typer.Context) -> None:
    """Show ledger entries per store with duplicate counts."""
    from ragsync.sync.maintenance import inspect_ledger

    cfg = get_config(ctx)
    try:
        report = asyncio.run(inspect_ledger(UploadLedger(cfg.ledger_path)))
    except RagSyncError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if not report:
        console.print(f"[yellow]Ledger is empty:[/yellow] {cfg.ledger_path}")
        return

    table = Table(title=f"Ledger: {cfg.ledger_path}")
    table.add_column("Store", style="bold", no_wrap=True)
    table.add_column("Entries", justify="right")
    table.add_column("Unique", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_column("Last update")
    for store_id, analysis in sorted(report.items()):
        dup = analysis.duplicate_count
        table.add_row(
            store_id,
            str(analysis.total_entries),
            str(analysis.unique_files),
            f"[red]{dup}[/red]" if dup else "0",
            analysis.last_update or "",
        )
    console.print(table)


@ledger_app.command("verify")
def ledger_verify(
    ctx: typer.Context,
    store_id: Annotated[str, typer.Argument(help="Store resource name")],
    list_files: Annotated[
        bool,
        typer.Option("--list", "-l", help="List every recorded file name"),
    ] = False,
) -> None:
    """Check one store's ledger entry for duplicates."""
    from ragsync.sync.maintenance import verify_ledger

    cfg = get_config(ctx)
    try:
        v = asyncio.run(verify_ledger(UploadLedger(cfg.ledger_path), store_id))
    except RagSyncError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"Total entries: {v.total_entries}")
    console.print(f"Unique files: {v.unique_files}")
    if v.ok:
        console.print("[green]✓[/green] No duplicates")
    else:
        console.print(f"[red]{len(v.duplicate_files)} duplicated file name(s):[/red]")
        for name, count in sorted(v.duplicate_files.items()):
            console.print(f"  {name} (x{count})")
    if list_files:
        for i, name in enumerate(v.file_names, start=1):
            console.print(f"{i:4d}. {name}")


@ledger_app.command("dedupe")
def ledger_dedupe(
    ctx: typer.Context,
    store_id: Annotated[
        str | None,
        typer.Argument(help="Store resource name (default: every store)"),
    ] = None,
) -> None:
    """Collapse duplicate ledger entries."""
    from ragsync.sync.maintenance import deduplicate_ledger

    cfg = get_config(ctx)
    ids = [store_id] if store_id else None
    try:
        results = asyncio.run(deduplicate_ledger(UploadLedger(cfg.ledger_path), ids))
    except RagSyncError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if not results:
        console.print("[yellow]Ledger is empty.[/yellow]")
        return
    for sid, r in sorted(results.items()):
        console.print(f"{sid}: {r.before} -> {r.after} (removed {r.removed})")


# ----------------------------------------------------------------------
# config
# ----------------------------------------------------------------------


@config_app.command("set-api-key")
def set_api_key(
    key: Annotated[
        str,
        typer.Argument(help="Gemini API key to store in system keyring"),
    ],
) -> None:
    """Store the Gemini API key in the system keyring."""
    if not key or key.strip() == "":
        console.print("[red]Error:[/red] API key cannot be empty")
        raise typer.Exit(code=1)

    try:
        set_keyring_api_key(key)
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to store API key: {e}")
        raise typer.Exit(code=1)
    console.print(
        f"[green]✓[/green] API key stored in system keyring (service: {SERVICE_NAME})"
    )


@config_app.command("get-api-key")
def show_api_key() -> None:
    """Display the stored Gemini API key (masked)."""
    api_key = get_keyring_api_key()
    if not api_key:
        console.print(
            "[yellow]No API key found in keyring.[/yellow]\n"
            "Set it with: [bold]ragsync config set-api-key YOUR_KEY[/bold]"
        )
        raise typer.Exit(code=1)

    if len(api_key) > 8:
        masked = api_key[:8] + "*" * (len(api_key) - 8)
    else:
        masked = api_key[:2] + "*" * max(1, len(api_key) - 2)

    console.print(f"[green]API key:[/green] {masked}")
    console.print(f"[dim](stored in service: {SERVICE_NAME})[/dim]")


@config_app.command("remove-api-key")
def remove_api_key() -> None:
    """Delete the stored Gemini API key from the system keyring."""
    try:
        removed = remove_keyring_api_key()
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to remove API key: {e}")
        raise typer.Exit(code=1)

    if not removed:
        console.print("[yellow]Warning:[/yellow] No API key found in keyring.\nNothing to remove.")
        return
    console.print(f"[green]✓[/green] API key removed from system keyring (service: {SERVICE_NAME})")
