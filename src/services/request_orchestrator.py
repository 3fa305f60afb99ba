# src/services/request_orchestrator.py

"""Coordinates the four remote operations against one view model.

Each public coroutine issues a single remote call, holds an operation
marker on the :class:`ViewModel` while it is in flight and translates
the outcome into view state.  Remote and validation failures never
escape: they come back as an :class:`OperationOutcome` and, for remote
failures, as the view model's ``last_error``.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from src.clients.base_client import RemoteError, to_number
from src.clients.catalog_gateway import CatalogGateway
from src.clients.tracking_store import TrackingFormatError, TrackingStore
from src.config.settings import Settings
from src.models.product import NoResults
from src.models.tracked_item import TrackedItem
from src.models.view_model import OperationState, ViewModel

logger = logging.getLogger("price_watch.orchestrator")


class ValidationError(Exception):
    """User input rejected before any remote call was made."""


class SubmitAction(StrEnum):
    """Which control submitted the shared query form."""

    SEARCH = "search"
    TRACK = "track"


@dataclass(frozen=True)
class OperationOutcome:
    """What happened to one user action, for notices and exit codes."""

    action: str
    ok: bool
    message: str = ""
    superseded: bool = False


class RequestOrchestrator:
    """Runs search and tracking operations and updates the view model."""

    def __init__(
        self,
        view_model: ViewModel | None = None,
        gateway: CatalogGateway | None = None,
        store: TrackingStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.view_model = ViewModel() if view_model is None else view_model
        self.gateway = CatalogGateway() if gateway is None else gateway
        self.store = TrackingStore() if store is None else store
        self.settings = Settings()
        self._clock = clock
        self._search_generation = 0
        self._last_id = 0

    # ── Search ───────────────────────────────────────────

    async def search(self, query: str) -> OperationOutcome:
        """Search the catalog for a user-typed query.

        Blank queries are ignored: no remote call, no state change.
        """
        query = query.strip()
        if not query:
            logger.debug("Ignoring blank search query")
            return OperationOutcome("search", ok=False)
        return await self._run_search(query, OperationState.SEARCHING)

    async def search_from_tracked_item(
        self, item: TrackedItem,
    ) -> OperationOutcome:
        """Search again for the product behind an existing tracked item.

        Raises the loading flag without the ``SEARCHING`` label.  Items
        that are not in the current tracked set are refused.
        """
        if not self.view_model.has_tracked(item.id):
            logger.warning(
                "Re-search refused, %d is not tracked", item.id
            )
            return OperationOutcome("search", ok=False)
        return await self._run_search(item.product_name, None)

    async def _run_search(
        self, query: str, label: OperationState | None,
    ) -> OperationOutcome:
        """Issue one search; results of a superseded search are dropped."""
        self._search_generation += 1
        generation = self._search_generation
        vm = self.view_model

        with vm.operation(label):
            vm.clear_error()
            vm.clear_search()
            try:
                products = await asyncio.to_thread(
                    self.gateway.search, query
                )
            except RemoteError as exc:
                logger.error(
                    "Search for '%s' failed: %s",
                    query,
                    exc,
                    exc_info=True,
                )
                if generation != self._search_generation:
                    return OperationOutcome(
                        "search", ok=False, superseded=True
                    )
                message = self.settings.SEARCH_ERROR_MESSAGE
                vm.set_error(message)
                return OperationOutcome("search", ok=False, message=message)

            if generation != self._search_generation:
                logger.info(
                    "Discarding superseded results for '%s'", query
                )
                return OperationOutcome(
                    "search", ok=False, superseded=True
                )

            if products:
                vm.set_search_results(products)
            else:
                vm.set_search_results(
                    [NoResults(self.settings.NO_RESULTS_MESSAGE)]
                )
        return OperationOutcome("search", ok=True)

    # ── Tracking ─────────────────────────────────────────

    def _validate_track_input(
        self, product_name: str, target_price: Any,
    ) -> tuple[str, float]:
        """Return the cleaned name and price, or raise ValidationError."""
        name = (product_name or "").strip()
        if not name:
            raise ValidationError(
                self.settings.EMPTY_PRODUCT_NAME_MESSAGE
            )
        try:
            price = to_number(target_price)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                self.settings.INVALID_TARGET_PRICE_MESSAGE
            ) from exc
        if price <= 0:
            raise ValidationError(
                self.settings.INVALID_TARGET_PRICE_MESSAGE
            )
        return name, price

    def _next_id(self, now: datetime) -> int:
        """Millisecond timestamp id, bumped to stay unique."""
        candidate = max(
            int(now.timestamp() * 1000), self._last_id + 1
        )
        taken = self.view_model.tracked_ids()
        while candidate in taken:
            candidate += 1
        self._last_id = candidate
        return candidate

    async def add_tracked(
        self, product_name: str, target_price: Any,
    ) -> OperationOutcome:
        """Start tracking a product against a target price."""
        try:
            name, price = self._validate_track_input(
                product_name, target_price
            )
        except ValidationError as exc:
            logger.info("Track request rejected: %s", exc)
            return OperationOutcome("track", ok=False, message=str(exc))

        now = self._clock()
        item = TrackedItem(
            id=self._next_id(now),
            product_name=name,
            target_price=price,
            created_at=now.strftime(self.settings.CREATED_AT_FORMAT),
        )
        vm = self.view_model

        with vm.operation(OperationState.TRACKING_ADD):
            vm.clear_error()
            try:
                await asyncio.to_thread(self.store.add, item)
            except RemoteError as exc:
                logger.error(
                    "Adding '%s' failed: %s", name, exc, exc_info=True
                )
                message = self.settings.TRACK_ADD_ERROR_MESSAGE
                vm.set_error(message)
                return OperationOutcome("track", ok=False, message=message)
            # A resync that finished meanwhile may already hold it
            if not vm.has_tracked(item.id):
                vm.append_tracked(item)

        return OperationOutcome(
            "track",
            ok=True,
            message=self.settings.TRACK_ADD_SUCCESS_MESSAGE,
        )

    async def list_tracked(self) -> OperationOutcome:
        """Replace the tracked set with the store's full collection."""
        vm = self.view_model
        with vm.operation(OperationState.TRACKING_LIST):
            vm.clear_error()
            try:
                items = await asyncio.to_thread(self.store.list_items)
            except TrackingFormatError as exc:
                logger.error(
                    "Tracked list malformed: %s", exc, exc_info=True
                )
                message = self.settings.TRACK_LIST_FORMAT_ERROR_MESSAGE
                vm.set_error(message)
                return OperationOutcome("list", ok=False, message=message)
            except RemoteError as exc:
                logger.error(
                    "Listing tracked items failed: %s",
                    exc,
                    exc_info=True,
                )
                message = self.settings.TRACK_LIST_ERROR_MESSAGE
                vm.set_error(message)
                return OperationOutcome("list", ok=False, message=message)
            vm.replace_tracked(items)
        return OperationOutcome("list", ok=True)

    async def remove_tracked(self, item_id: int) -> OperationOutcome:
        """Remove an item remotely, then resync the whole tracked set.

        The local set is never edited directly; only the resync changes it.
        """
        vm = self.view_model
        with vm.operation(OperationState.TRACKING_REMOVE):
            vm.clear_error()
            try:
                await asyncio.to_thread(self.store.remove, item_id)
            except RemoteError as exc:
                logger.error(
                    "Removing %d failed: %s", item_id, exc, exc_info=True
                )
                message = self.settings.TRACK_REMOVE_ERROR_MESSAGE
                vm.set_error(message)
                return OperationOutcome("remove", ok=False, message=message)

        resync = await self.list_tracked()
        if not resync.ok:
            return OperationOutcome(
                "remove", ok=False, message=resync.message
            )
        return OperationOutcome(
            "remove",
            ok=True,
            message=self.settings.TRACK_REMOVE_SUCCESS_MESSAGE,
        )

    # ── Form dispatch ────────────────────────────────────

    async def submit(
        self,
        action: SubmitAction | str,
        query: str,
        target_price: Any = None,
    ) -> OperationOutcome:
        """Route the shared query form to search or add-tracked.

        Raises ``ValueError`` for an unknown action tag.
        """
        action = SubmitAction(action)
        if action is SubmitAction.SEARCH:
            return await self.search(query)
        return await self.add_tracked(query, target_price)
