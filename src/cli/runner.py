# src/cli/runner.py

"""Headless CLI runner, driving the same orchestrator as the TUI."""

import json
import logging
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from src.models.product import NoResults, Product, SearchEntry
from src.models.tracked_item import TrackedItem
from src.models.view_model import ViewSnapshot
from src.services.request_orchestrator import (
    OperationOutcome,
    RequestOrchestrator,
    SubmitAction,
)

logger = logging.getLogger("price_watch.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _entries_to_dicts(
    entries: tuple[SearchEntry, ...],
) -> list[dict[str, object]]:
    """Serialise search entries; the no-results sentinel keeps its message."""
    rows: list[dict[str, object]] = []
    for entry in entries:
        if isinstance(entry, NoResults):
            rows.append({"message": entry.message})
        else:
            rows.append(
                {
                    "name": entry.name,
                    "price": entry.price,
                    "detail_link": entry.detail_link,
                }
            )
    return rows


def _items_to_dicts(
    items: tuple[TrackedItem, ...],
) -> list[dict[str, object]]:
    """Serialise tracked items to plain dicts for JSON output."""
    return [
        {
            "id": item.id,
            "product_name": item.product_name,
            "target_price": item.target_price,
            "created_at": item.created_at,
        }
        for item in items
    ]


def _dump_json(rows: list[dict[str, object]]) -> None:
    json.dump(rows, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _print_results_table(products: list[Product]) -> None:
    """Render a Rich table of search results to stdout."""
    table = Table(
        title="Search Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=60)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Link", overflow="fold", style="dim")

    for idx, p in enumerate(products, 1):
        table.add_row(
            str(idx),
            p.name[:60],
            f"{p.price:,.2f}",
            p.detail_link or "—",
        )
    Console().print(table)


def _print_tracked_table(items: tuple[TrackedItem, ...]) -> None:
    """Render a Rich table of tracked items to stdout."""
    table = Table(
        title="Tracked Items",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("ID", style="dim")
    table.add_column("Product", max_width=60)
    table.add_column("Target", justify="right", style="green")
    table.add_column("Created", style="magenta")

    for item in items:
        table.add_row(
            str(item.id),
            item.product_name[:60],
            f"{item.target_price:,.2f}",
            item.created_at or "—",
        )
    Console().print(table)


def _report(outcome: OperationOutcome) -> int:
    """Print an outcome message to stderr and map it to an exit code."""
    if outcome.ok:
        if outcome.message:
            _err.print(f"[green]✓ {outcome.message}[/green]")
        return 0
    if outcome.message:
        _err.print(f"[red]{outcome.message}[/red]")
    return 1


def _output_tracked(snapshot: ViewSnapshot, output_format: str) -> None:
    if output_format == "table":
        _print_tracked_table(snapshot.tracked_items)
    else:
        _dump_json(_items_to_dicts(snapshot.tracked_items))


async def cli_search(
    query: str,
    output_format: str,
    orchestrator: RequestOrchestrator | None = None,
) -> int:
    """Run a headless search and return an exit code (0=ok, 1=fail)."""
    orch = RequestOrchestrator() if orchestrator is None else orchestrator
    _err.print(f"[bold]Searching:[/bold] {query}")

    outcome = await orch.submit(SubmitAction.SEARCH, query)
    if not outcome.ok and not outcome.message:
        _err.print("[yellow]Empty query, nothing to search.[/yellow]")
        return 1
    if _report(outcome):
        return 1

    entries = orch.view_model.snapshot().search_results
    products = [e for e in entries if isinstance(e, Product)]
    if not products:
        for entry in entries:
            if isinstance(entry, NoResults):
                _err.print(f"[yellow]{entry.message}[/yellow]")
        if output_format != "table":
            _dump_json(_entries_to_dicts(entries))
        return 1

    _err.print(f"[green]✓ {len(products)} products[/green]")
    if output_format == "table":
        _print_results_table(products)
    else:
        _dump_json(_entries_to_dicts(entries))
    return 0


async def cli_track(
    product_name: str,
    target_price: Any,
    output_format: str,
    orchestrator: RequestOrchestrator | None = None,
) -> int:
    """Add a tracked item through the form dispatch path."""
    orch = RequestOrchestrator() if orchestrator is None else orchestrator
    _err.print(
        f"[bold]Tracking:[/bold] {product_name} "
        f"[dim]target={target_price}[/dim]"
    )
    outcome = await orch.submit(
        SubmitAction.TRACK, product_name, target_price
    )
    code = _report(outcome)
    if code == 0:
        _output_tracked(orch.view_model.snapshot(), output_format)
    return code


async def cli_list(
    output_format: str,
    orchestrator: RequestOrchestrator | None = None,
) -> int:
    """Print the tracked items held by the remote store."""
    orch = RequestOrchestrator() if orchestrator is None else orchestrator
    outcome = await orch.list_tracked()
    code = _report(outcome)
    if code == 0:
        snapshot = orch.view_model.snapshot()
        _err.print(
            f"[green]✓ {len(snapshot.tracked_items)} tracked items[/green]"
        )
        _output_tracked(snapshot, output_format)
    return code


async def cli_remove(
    item_id: int,
    output_format: str,
    orchestrator: RequestOrchestrator | None = None,
) -> int:
    """Remove a tracked item and print the resynchronised list."""
    orch = RequestOrchestrator() if orchestrator is None else orchestrator
    _err.print(f"[bold]Removing:[/bold] {item_id}")
    outcome = await orch.remove_tracked(item_id)
    code = _report(outcome)
    if code == 0:
        _output_tracked(orch.view_model.snapshot(), output_format)
    return code


async def run_health_check() -> int:
    """Run a connectivity check on all configured endpoints."""
    from src.services.health_checker import HealthChecker

    _err.print("[bold]Running endpoint health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Endpoint Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Endpoint", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        elif r.status == "unconfigured":
            status = "[dim]— UNSET[/dim]"
            any_down = True
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(r.endpoint_id, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
