# src/cli/runner.py

"""Headless monitor run: fetch, extract, compare, deliver, persist."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from src.delivery.payload import format_payload
from src.delivery.webhook_sender import WebhookSender
from src.models.comparison import (
    ChangeKind,
    ComparisonResult,
    ComparisonStatus,
    Direction,
)
from src.models.snapshot import Snapshot, SnapshotFormatError
from src.scrapers.page_fetcher import PageFetcher
from src.services.extraction_pipeline import ExtractionPipeline
from src.services.snapshot_assembler import SnapshotAssembler
from src.services.snapshot_differ import SnapshotDiffer, impossible_result
from src.storage.snapshot_store import SnapshotStore
from src.utils.currency import format_rupiah

logger = logging.getLogger("gold_watch.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

EXIT_OK = 0
EXIT_EXTRACTION_FAILED = 1
EXIT_COMPARISON_IMPOSSIBLE = 2


def _print_table(snapshot: Snapshot) -> None:
    """Render the captured prices as a Rich table on stdout."""
    table = Table(
        title=f"Harga Emas - {snapshot.source_id}",
        caption=snapshot.update_time_label or None,
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Type")
    table.add_column("Sell", justify="right", style="green")
    table.add_column("Per gram", justify="right")
    table.add_column("Strategy", style="dim")

    for record in snapshot.records:
        table.add_row(
            record.label,
            record.formatted_sell_price,
            format_rupiah(record.price_per_unit),
            record.origin_strategy,
        )
    if snapshot.buyback:
        table.add_row(
            snapshot.buyback.label,
            snapshot.buyback.formatted_price,
            "-",
            "",
        )
    Console().print(table)


def _print_changes(comparison: ComparisonResult) -> None:
    """Status lines on stderr for each detected change."""
    _err.print(f"[bold]Result:[/bold] {comparison.message}")
    for idx, change in enumerate(comparison.changes, 1):
        if change.kind is ChangeKind.NEW:
            _err.print(
                f"  {idx}. [cyan][NEW][/cyan] {change.label} "
                f"{change.formatted_new_sell_price}"
            )
            continue
        arrow = "↑" if change.direction is Direction.UP else "↓"
        percent = (
            f"{change.difference_percent}%"
            if change.difference_percent is not None
            else "n/a"
        )
        _err.print(
            f"  {idx}. {change.label}: "
            f"{change.formatted_old_sell_price} → "
            f"{change.formatted_new_sell_price} {arrow} {percent}"
        )


def _read_markup(from_file: str) -> str | None:
    try:
        return Path(from_file).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Cannot read %s: %s", from_file, exc)
        return None


def _compare(
    store: SnapshotStore,
    differ: SnapshotDiffer,
    snapshot: Snapshot,
) -> ComparisonResult:
    try:
        raw_old = store.load_raw()
    except SnapshotFormatError as exc:
        logger.error("Stored snapshot unreadable: %s", exc)
        return impossible_result(str(exc))
    if raw_old is not None:
        _err.print(
            f"[dim]Previous snapshot: {raw_old.get('capturedAt', '?')}[/dim]"
        )
    else:
        _err.print("[dim]No previous snapshot (first run)[/dim]")
    return differ.compare_persisted(snapshot, raw_old)


async def cli_monitor(
    url: str | None = None,
    from_file: str | None = None,
    data_file: str | None = None,
    webhook_url: str | None = None,
    output_format: str = "json",
    dry_run: bool = False,
    force_save: bool = False,
) -> int:
    """Run one monitor cycle and return an exit code."""
    store = SnapshotStore(Path(data_file) if data_file else None)
    pipeline = ExtractionPipeline(
        assembler=SnapshotAssembler(source_url=url)
    )
    differ = SnapshotDiffer()

    if dry_run:
        _err.print("[yellow]DRY RUN: webhook will not be sent[/yellow]")

    # Step 1: markup
    if from_file:
        markup = _read_markup(from_file)
    else:
        fetcher = PageFetcher(url)
        _err.print(f"[bold]Fetching:[/bold] {fetcher.url}")
        markup = await asyncio.to_thread(fetcher.fetch)
    if not markup:
        _err.print("[red]Could not retrieve the page.[/red]")
        return EXIT_EXTRACTION_FAILED

    # Step 2: extraction
    outcome = await pipeline.run_async(markup)
    for name, error in outcome.failures.items():
        _err.print(f"[dim]{name} strategy failed: {error}[/dim]")
    if not outcome.ok or outcome.snapshot is None:
        _err.print(
            f"[red]{outcome.error}. "
            "The page layout may have changed.[/red]"
        )
        return EXIT_EXTRACTION_FAILED
    snapshot = outcome.snapshot
    _err.print(f"[green]✓ {len(snapshot.records)} prices extracted[/green]")

    # Step 3: comparison
    comparison = _compare(store, differ, snapshot)
    _print_changes(comparison)

    if comparison.status is ComparisonStatus.IMPOSSIBLE:
        _err.print(f"[red]{comparison.error}[/red]")
        if force_save:
            store.save(snapshot)
            _err.print("[yellow]Stored snapshot overwritten.[/yellow]")
        return EXIT_COMPARISON_IMPOSSIBLE

    # Step 4: delivery
    payload: dict[str, Any] | None = None
    if comparison.has_changed:
        payload = format_payload(snapshot, comparison)
        if not dry_run:
            result = await asyncio.to_thread(
                WebhookSender(webhook_url).send, payload
            )
            if result.success:
                _err.print("[green]✓ Webhook delivered[/green]")
            else:
                _err.print(
                    "[red]Webhook failed: "
                    f"{result.error or result.reason}[/red]"
                )
    else:
        _err.print("[dim]No change, webhook skipped[/dim]")

    # Step 5: persistence
    path = store.save(snapshot)
    _err.print(f"[dim]Saved → {path}[/dim]")

    # Output to stdout
    if output_format == "table":
        _print_table(snapshot)
    else:
        document: dict[str, Any] = (
            payload
            if dry_run and payload is not None
            else {
                "snapshot": snapshot.to_dict(),
                "comparison": comparison.to_dict(),
            }
        )
        json.dump(document, sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write("\n")

    return EXIT_OK
