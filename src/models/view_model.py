# src/models/view_model.py

"""In-memory view state shared by the orchestrator and the presentation layer.

The :class:`ViewModel` is the single owner of the last search results,
the tracked-item set and the loading/error indicators.  Only the request
orchestrator mutates it.  Renderers never see the live object; they get a
frozen :class:`ViewSnapshot` instead, either by calling :meth:`snapshot`
or by registering a listener that receives one after every change.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum

from src.models.product import SearchEntry
from src.models.tracked_item import TrackedItem

logger = logging.getLogger("price_watch.view_model")


class OperationState(Enum):
    """Label of the remote operation currently in flight."""

    IDLE = "idle"
    SEARCHING = "searching"
    TRACKING_ADD = "trackingAdd"
    TRACKING_LIST = "trackingList"
    TRACKING_REMOVE = "trackingRemove"


@dataclass(frozen=True)
class ViewSnapshot:
    """Immutable copy of the view state for one render."""

    search_results: tuple[SearchEntry, ...] = ()
    tracked_items: tuple[TrackedItem, ...] = ()
    operation: OperationState = OperationState.IDLE
    loading: bool = False
    last_error: str | None = None


Listener = Callable[[ViewSnapshot], None]


class ViewModel:
    """Mutable view state; see the module docstring for ownership rules."""

    def __init__(self) -> None:
        self._search_results: list[SearchEntry] = []
        self._tracked: dict[int, TrackedItem] = {}
        # Active markers in start order; ``None`` is an unlabelled load.
        self._active: list[OperationState | None] = []
        self._last_error: str | None = None
        self._listeners: list[Listener] = []

    # ── Observation ──────────────────────────────────────

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked with a snapshot after each change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Unregister a previously added callback."""
        self._listeners.remove(listener)

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.error("View listener %r failed", listener, exc_info=True)

    def snapshot(self) -> ViewSnapshot:
        """Return a frozen copy of the current state."""
        labelled = [s for s in self._active if s is not None]
        return ViewSnapshot(
            search_results=tuple(self._search_results),
            tracked_items=tuple(self._tracked.values()),
            operation=labelled[-1] if labelled else OperationState.IDLE,
            loading=bool(self._active),
            last_error=self._last_error,
        )

    def has_tracked(self, item_id: int) -> bool:
        """Return True if an item with ``item_id`` is in the tracked set."""
        return item_id in self._tracked

    def tracked_ids(self) -> frozenset[int]:
        """Ids currently in the tracked set."""
        return frozenset(self._tracked)

    # ── Loading indicator ────────────────────────────────

    @contextmanager
    def operation(
        self, state: OperationState | None,
    ) -> Iterator[None]:
        """Mark an operation active for the duration of the block.

        The marker is released on every exit path, including exceptions.
        Pass ``None`` to raise the loading flag without a label.
        """
        if state is OperationState.IDLE:
            raise ValueError("IDLE is not an operation")
        self._active.append(state)
        logger.debug("Operation started: %s", state)
        self._notify()
        try:
            yield
        finally:
            self._active.remove(state)
            logger.debug("Operation finished: %s", state)
            self._notify()

    # ── Search results ───────────────────────────────────

    def clear_search(self) -> None:
        """Drop the current search results."""
        self._search_results = []
        self._notify()

    def set_search_results(self, entries: Iterable[SearchEntry]) -> None:
        """Replace the search results, keeping the given order."""
        self._search_results = list(entries)
        self._notify()

    # ── Tracked items ────────────────────────────────────

    def append_tracked(self, item: TrackedItem) -> None:
        """Add one tracked item; its id must not already be present."""
        if item.id in self._tracked:
            raise ValueError(f"Tracked item {item.id} already present")
        self._tracked[item.id] = item
        self._notify()

    def replace_tracked(self, items: Iterable[TrackedItem]) -> None:
        """Swap in a whole new tracked set (later duplicates win)."""
        self._tracked = {item.id: item for item in items}
        self._notify()

    # ── Errors ───────────────────────────────────────────

    def set_error(self, message: str) -> None:
        """Record the user-facing message of the last failure."""
        self._last_error = message
        self._notify()

    def clear_error(self) -> None:
        """Forget the last failure message."""
        if self._last_error is None:
            return
        self._last_error = None
        self._notify()
