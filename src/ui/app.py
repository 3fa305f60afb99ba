# src/ui/app.py

"""Terminal UI for the price_watch client."""

import logging
import webbrowser
from collections.abc import Awaitable
from typing import cast

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Static,
)
from textual.widgets.data_table import RowDoesNotExist

from src.models.product import NoResults, Product
from src.models.tracked_item import TrackedItem
from src.models.view_model import OperationState, ViewSnapshot
from src.services.request_orchestrator import (
    OperationOutcome,
    RequestOrchestrator,
    SubmitAction,
)

logger = logging.getLogger("price_watch.ui")

_LOADING_LABELS: dict[OperationState, str] = {
    OperationState.SEARCHING: "🔍 搜尋中...",
    OperationState.TRACKING_ADD: "➕ 加入追蹤中...",
    OperationState.TRACKING_LIST: "📋 載入追蹤清單...",
    OperationState.TRACKING_REMOVE: "🗑 移除中...",
    OperationState.IDLE: "⏳ 載入中...",
}


class PriceWatchApp(App[object]):
    """Search form, results and tracked list over one view model."""

    CSS_PATH = "styles.css"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("l", "refresh_tracked", "Refresh"),
        Binding("d", "remove_tracked", "Remove"),
        Binding("r", "research", "Re-search"),
        Binding("o", "open_link", "Open link"),
    ]

    def __init__(
        self, orchestrator: RequestOrchestrator | None = None,
    ) -> None:
        super().__init__()
        self.orchestrator = (
            RequestOrchestrator() if orchestrator is None else orchestrator
        )
        self.view_model = self.orchestrator.view_model
        self.view_snapshot: ViewSnapshot = self.view_model.snapshot()

    def compose(self) -> ComposeResult:
        """Build the widget tree for the TUI."""
        yield Header()
        yield Container(
            Static("🛒 搜尋商品 / 價格追蹤", id="title"),
            Horizontal(
                Input(placeholder="請輸入商品名稱", id="query_input"),
                Input(placeholder="目標價格", id="target_price_input"),
                Button("搜尋", variant="primary", id="search_btn"),
                Button("加入追蹤", variant="warning", id="track_btn"),
                id="search_form",
            ),
            Static("Ready", id="status"),
            Static("搜尋結果", classes="section"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="results_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            Static("追蹤清單", classes="section"),
            cast(
                DataTable[str | Text],
                DataTable(
                    id="tracked_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            id="main_container",
        )
        yield Footer()

    def on_mount(self) -> None:
        """Set up tables, subscribe to the view model, load the list."""
        self._results_table().add_columns("Product", "Price", "Link")
        self._tracked_table().add_columns(
            "ID", "Product", "Target", "Created"
        )
        self.view_model.add_listener(self.render_snapshot)
        self.render_snapshot(self.view_model.snapshot())
        self._start(self.orchestrator.list_tracked(), "tracking")

    def on_unmount(self) -> None:
        """Stop receiving view model updates."""
        self.view_model.remove_listener(self.render_snapshot)

    # ── Widget lookups ───────────────────────────────────

    def _results_table(self) -> DataTable[str | Text]:
        return cast(
            DataTable[str | Text],
            self.query_one("#results_table", DataTable),
        )

    def _tracked_table(self) -> DataTable[str | Text]:
        return cast(
            DataTable[str | Text],
            self.query_one("#tracked_table", DataTable),
        )

    # ── Intents ──────────────────────────────────────────

    def _start(
        self, pending: Awaitable[OperationOutcome], group: str,
    ) -> None:
        """Run an orchestrator call as a worker so actions can overlap."""
        self.run_worker(self._report(pending), group=group)

    async def _report(self, pending: Awaitable[OperationOutcome]) -> None:
        """Await an outcome and surface its message as a notification."""
        outcome = await pending
        if outcome.superseded or not outcome.message:
            return
        self.notify(
            outcome.message,
            severity="information" if outcome.ok else "error",
        )

    def submit(self, action: SubmitAction) -> None:
        """Forward the shared form to the orchestrator with its action tag."""
        query = self.query_one("#query_input", Input).value
        target = self.query_one("#target_price_input", Input).value
        if action is SubmitAction.SEARCH and not query.strip():
            self.notify("請輸入商品名稱", severity="warning")
            return
        self._start(
            self.orchestrator.submit(action, query, target or None),
            action.value,
        )

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        """Handle button click events."""
        if event.button.id == "search_btn":
            self.submit(SubmitAction.SEARCH)
        elif event.button.id == "track_btn":
            self.submit(SubmitAction.TRACK)

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter searches from the query box, tracks from the price box."""
        if event.input.id == "query_input":
            self.submit(SubmitAction.SEARCH)
        elif event.input.id == "target_price_input":
            self.submit(SubmitAction.TRACK)

    def selected_tracked_item(self) -> TrackedItem | None:
        """Tracked item under the tracked-table cursor, if any."""
        key = _cursor_key(self._tracked_table())
        if key is None:
            return None
        for item in self.view_snapshot.tracked_items:
            if str(item.id) == key:
                return item
        return None

    def action_refresh_tracked(self) -> None:
        """Reload the tracked list from the store."""
        self._start(self.orchestrator.list_tracked(), "tracking")

    def action_remove_tracked(self) -> None:
        """Remove the selected tracked item."""
        item = self.selected_tracked_item()
        if item is None:
            self.notify("請先選擇追蹤項目", severity="warning")
            return
        self._start(self.orchestrator.remove_tracked(item.id), "tracking")

    def action_research(self) -> None:
        """Search again for the selected tracked item's product."""
        item = self.selected_tracked_item()
        if item is None:
            self.notify("請先選擇追蹤項目", severity="warning")
            return
        self.query_one("#query_input", Input).value = item.product_name
        self._start(
            self.orchestrator.search_from_tracked_item(item), "search"
        )

    def action_open_link(self) -> None:
        """Open the highlighted result's detail link."""
        key = _cursor_key(self._results_table())
        if key is not None:
            self._open_result(int(key))

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected
    ) -> None:
        """Enter on a result row opens its detail link."""
        if event.data_table.id == "results_table":
            self._open_result(event.cursor_row)

    def _open_result(self, row: int) -> None:
        results = self.view_snapshot.search_results
        if not 0 <= row < len(results):
            return
        entry = results[row]
        if isinstance(entry, Product) and entry.detail_link:
            logger.info("Opening %s", entry.detail_link)
            webbrowser.open(entry.detail_link)

    # ── Rendering ────────────────────────────────────────

    def render_snapshot(self, snapshot: ViewSnapshot) -> None:
        """Redraw status and both tables from a view snapshot."""
        self.view_snapshot = snapshot
        status = self.query_one("#status", Static)
        if snapshot.last_error:
            status.update(f"❌ {snapshot.last_error}")
        elif snapshot.loading:
            status.update(_LOADING_LABELS[snapshot.operation])
        else:
            status.update("Ready")

        results = self._results_table()
        selected = _cursor_key(results)
        results.clear()
        for index, entry in enumerate(snapshot.search_results):
            if isinstance(entry, NoResults):
                results.add_row(
                    Text(entry.message, style="italic"), "", "",
                    key=str(index),
                )
            else:
                results.add_row(
                    entry.name[:60],
                    Text(f"{entry.price:,.2f}", style="bold green"),
                    entry.detail_link or "—",
                    key=str(index),
                )
        _restore_cursor(results, selected)

        tracked = self._tracked_table()
        selected = _cursor_key(tracked)
        tracked.clear()
        for item in snapshot.tracked_items:
            tracked.add_row(
                str(item.id),
                item.product_name[:60],
                f"{item.target_price:,.2f}",
                item.created_at,
                key=str(item.id),
            )
        _restore_cursor(tracked, selected)


def _cursor_key(table: DataTable[str | Text]) -> str | None:
    """Key of the highlighted row, or ``None`` for an empty table."""
    if table.row_count == 0:
        return None
    row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
    return row_key.value


def _restore_cursor(table: DataTable[str | Text], key: str | None) -> None:
    """Put the cursor back on the row with ``key`` if it is still shown."""
    if key is None:
        return
    try:
        row = table.get_row_index(key)
    except RowDoesNotExist:
        return
    table.move_cursor(row=row)
