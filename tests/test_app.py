# tests/test_app.py

"""Smoke tests for the TUI application using Textual's Pilot."""

import unittest
from unittest.mock import MagicMock, patch

from textual.widgets import DataTable, Input, Static

from src.clients.base_client import RemoteError
from src.clients.catalog_gateway import CatalogGateway
from src.clients.tracking_store import TrackingStore
from src.config.settings import Settings
from src.models.product import NoResults, Product
from src.models.tracked_item import TrackedItem
from src.models.view_model import ViewModel
from src.services.request_orchestrator import RequestOrchestrator, SubmitAction
from src.ui.app import PriceWatchApp

CABLE = TrackedItem(
    id=42,
    product_name="USB-C Cable 1m",
    target_price=150.0,
    created_at="2024/05/01 12:00:00",
)


def _make_app(
    tracked: list[TrackedItem] | None = None,
) -> tuple[PriceWatchApp, MagicMock, MagicMock]:
    """Build the app over mock clients; the store lists ``tracked``."""
    gateway = MagicMock(spec=CatalogGateway)
    gateway.search.return_value = []
    store = MagicMock(spec=TrackingStore)
    store.list_items.return_value = list(tracked or [])
    orch = RequestOrchestrator(ViewModel(), gateway, store)
    return PriceWatchApp(orch), gateway, store


class TestPriceWatchApp(unittest.IsolatedAsyncioTestCase):
    """Smoke tests for the Textual TUI."""

    async def test_app_composes_without_crash(self) -> None:
        """The app starts and renders all widgets."""
        app, _, _ = _make_app()
        async with app.run_test() as pilot:
            app.query_one("#query_input", Input)
            app.query_one("#target_price_input", Input)
            app.query_one("#search_btn")
            app.query_one("#track_btn")
            app.query_one("#status", Static)
            app.query_one("#results_table", DataTable)
            app.query_one("#tracked_table", DataTable)
            await pilot.pause()

    async def test_tracked_list_loaded_on_mount(self) -> None:
        """The tracked table is filled from the store at startup."""
        app, _, store = _make_app([CABLE])
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            store.list_items.assert_called_once()
            self.assertEqual(
                app.query_one("#tracked_table", DataTable).row_count, 1
            )

    async def test_search_fills_results(self) -> None:
        """Submitting a search renders one row per product."""
        app, gateway, _ = _make_app()
        gateway.search.return_value = [
            Product(name="USB-C Cable 1m", price=199.0, detail_link="http://x/1"),
            Product(name="USB-C Cable 2m", price=249.0),
        ]
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#query_input", Input).value = "USB cable"
            app.submit(SubmitAction.SEARCH)
            await app.workers.wait_for_complete()
            await pilot.pause()

            gateway.search.assert_called_once_with("USB cable")
            self.assertEqual(
                app.query_one("#results_table", DataTable).row_count, 2
            )
            self.assertFalse(app.view_snapshot.loading)

    async def test_enter_in_query_box_searches(self) -> None:
        """Pressing Enter in the query input submits a search."""
        app, gateway, _ = _make_app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            query_input = app.query_one("#query_input", Input)
            query_input.value = "cable"
            query_input.focus()
            await pilot.press("enter")
            await pilot.pause()
            await app.workers.wait_for_complete()
            gateway.search.assert_called_once_with("cable")

    async def test_no_results_row(self) -> None:
        """An empty answer shows the sentinel as a single row."""
        app, _, _ = _make_app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#query_input", Input).value = "zzz-no-match"
            app.submit(SubmitAction.SEARCH)
            await app.workers.wait_for_complete()
            await pilot.pause()

            self.assertEqual(
                app.query_one("#results_table", DataTable).row_count, 1
            )
            self.assertIsInstance(app.view_snapshot.search_results[0], NoResults)

    async def test_blank_search_skips_remote(self) -> None:
        """A blank query never reaches the gateway."""
        app, gateway, _ = _make_app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.submit(SubmitAction.SEARCH)
            await app.workers.wait_for_complete()
            await pilot.pause()
            gateway.search.assert_not_called()

    async def test_search_error_shown(self) -> None:
        """A failed search surfaces the localized error."""
        app, gateway, _ = _make_app()
        gateway.search.side_effect = RemoteError("HTTP 500")
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#query_input", Input).value = "cable"
            app.submit(SubmitAction.SEARCH)
            await app.workers.wait_for_complete()
            await pilot.pause()
            self.assertEqual(
                app.view_snapshot.last_error, Settings.SEARCH_ERROR_MESSAGE
            )
            self.assertFalse(app.view_snapshot.loading)

    async def test_track_button_adds_item(self) -> None:
        """The track action posts the form fields to the store."""
        app, gateway, store = _make_app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#query_input", Input).value = "USB-C Cable 1m"
            app.query_one("#target_price_input", Input).value = "150"
            app.submit(SubmitAction.TRACK)
            await app.workers.wait_for_complete()
            await pilot.pause()

            gateway.search.assert_not_called()
            item = store.add.call_args[0][0]
            self.assertEqual(item.product_name, "USB-C Cable 1m")
            self.assertEqual(item.target_price, 150.0)
            self.assertEqual(
                app.query_one("#tracked_table", DataTable).row_count, 1
            )

    async def test_remove_selected_item(self) -> None:
        """The remove binding removes the highlighted tracked item."""
        app, _, store = _make_app([CABLE])
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            store.list_items.return_value = []
            app.action_remove_tracked()
            await app.workers.wait_for_complete()
            await pilot.pause()

            store.remove.assert_called_once_with(42)
            self.assertEqual(
                app.query_one("#tracked_table", DataTable).row_count, 0
            )

    async def test_tracked_cursor_survives_rerender(self) -> None:
        """A search re-renders the tables without moving the tracked cursor."""
        items = [
            TrackedItem(id=n, product_name=f"Item {n}", target_price=10.0 * n,
                        created_at="")
            for n in (1, 2, 3)
        ]
        app, _, store = _make_app(items)
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            table = app.query_one("#tracked_table", DataTable)
            table.focus()
            table.move_cursor(row=2)
            await pilot.pause()

            await app.orchestrator.search("x")
            await pilot.pause()
            self.assertEqual(table.cursor_row, 2)
            self.assertEqual(app.selected_tracked_item(), items[2])

            await pilot.press("d")
            await app.workers.wait_for_complete()
            await pilot.pause()
            store.remove.assert_called_once_with(3)

    async def test_tracked_cursor_follows_item_after_refresh(self) -> None:
        """A refreshed list keeps the cursor on the same tracked id."""
        first = TrackedItem(id=1, product_name="A", target_price=1.0,
                            created_at="")
        app, _, store = _make_app([first, CABLE])
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            table = app.query_one("#tracked_table", DataTable)
            table.move_cursor(row=1)
            await pilot.pause()

            newer = TrackedItem(id=0, product_name="B", target_price=2.0,
                                created_at="")
            store.list_items.return_value = [newer, first, CABLE]
            app.action_refresh_tracked()
            await app.workers.wait_for_complete()
            await pilot.pause()
            self.assertEqual(app.selected_tracked_item(), CABLE)
            self.assertEqual(table.cursor_row, 2)

    @patch("src.ui.app.webbrowser.open")
    async def test_result_cursor_survives_rerender(
        self, mock_open: MagicMock
    ) -> None:
        """The open-link action uses the row that was highlighted."""
        app, gateway, _ = _make_app()
        gateway.search.return_value = [
            Product(name="Cable 1m", price=1.0, detail_link="http://x/1"),
            Product(name="Cable 2m", price=2.0, detail_link="http://x/2"),
        ]
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#query_input", Input).value = "cable"
            app.submit(SubmitAction.SEARCH)
            await app.workers.wait_for_complete()
            await pilot.pause()
            app.query_one("#results_table", DataTable).move_cursor(row=1)
            await pilot.pause()

            app.view_model.set_error("boom")
            app.view_model.clear_error()
            await pilot.pause()
            app.action_open_link()
            mock_open.assert_called_once_with("http://x/2")

    async def test_remove_without_selection(self) -> None:
        """With no tracked items nothing is removed."""
        app, _, store = _make_app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.action_remove_tracked()
            await pilot.pause()
            store.remove.assert_not_called()

    async def test_research_selected_item(self) -> None:
        """The re-search binding searches the tracked product name."""
        app, gateway, _ = _make_app([CABLE])
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            await pilot.pause()
            app.action_research()
            await app.workers.wait_for_complete()
            await pilot.pause()

            gateway.search.assert_called_once_with("USB-C Cable 1m")
            self.assertEqual(
                app.query_one("#query_input", Input).value, "USB-C Cable 1m"
            )

    @patch("src.ui.app.webbrowser.open")
    async def test_open_link_skips_sentinel(self, mock_open: MagicMock) -> None:
        """The no-results row has no link to open."""
        app, _, _ = _make_app()
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#query_input", Input).value = "zzz"
            app.submit(SubmitAction.SEARCH)
            await app.workers.wait_for_complete()
            await pilot.pause()
            app.action_open_link()
            mock_open.assert_not_called()

    @patch("src.ui.app.webbrowser.open")
    async def test_open_link(self, mock_open: MagicMock) -> None:
        """A product row opens its detail link."""
        app, gateway, _ = _make_app()
        gateway.search.return_value = [
            Product(name="Cable", price=1.0, detail_link="http://x/1")
        ]
        async with app.run_test() as pilot:
            await app.workers.wait_for_complete()
            app.query_one("#query_input", Input).value = "cable"
            app.submit(SubmitAction.SEARCH)
            await app.workers.wait_for_complete()
            await pilot.pause()
            app.action_open_link()
            mock_open.assert_called_once_with("http://x/1")


if __name__ == "__main__":
    unittest.main()
