# src/clients/tracking_store.py

"""Client for the remote tracked-item store (add, list, remove).

The store reports items with human-language keys (``編號``,
``商品名稱`` ...).  This module is the only place those keys are known:
:func:`from_wire` maps them onto :class:`TrackedItem` fields via
``Settings.TRACKED_ITEM_WIRE_KEYS`` and :func:`to_wire` builds the add
request body.
"""

from typing import Any

from src.clients.base_client import BaseClient, RemoteError, to_number
from src.config.settings import Settings
from src.models.tracked_item import TrackedItem


class TrackingFormatError(RemoteError):
    """The list endpoint answered with something other than item objects."""


def _to_id(value: Any) -> int:
    """Coerce a wire id (int, integral float or digit string) to int."""
    if isinstance(value, bool):
        raise ValueError(f"Not an id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValueError(f"Not an id: {value!r}")


def from_wire(raw: Any) -> TrackedItem:
    """Translate one wire object into a TrackedItem."""
    if not isinstance(raw, dict):
        raise TrackingFormatError(f"Tracked entry is not an object: {raw!r}")

    fields: dict[str, Any] = {}
    for key, value in raw.items():
        field_name = Settings.TRACKED_ITEM_WIRE_KEYS.get(key)
        if field_name is not None and field_name not in fields:
            fields[field_name] = value

    try:
        item_id = _to_id(fields["id"])
        target_price = to_number(fields["target_price"])
    except (KeyError, TypeError, ValueError) as exc:
        raise TrackingFormatError(
            f"Tracked entry has a missing or invalid field: {raw!r}"
        ) from exc

    name = fields.get("product_name")
    if not isinstance(name, str) or not name:
        raise TrackingFormatError(
            f"Tracked entry without a product name: {raw!r}"
        )
    created_at = fields.get("created_at")
    return TrackedItem(
        id=item_id,
        product_name=name,
        target_price=target_price,
        created_at="" if created_at is None else str(created_at),
    )


def to_wire(item: TrackedItem) -> dict[str, Any]:
    """Build the add-request body for ``item``."""
    return {
        "id": item.id,
        "productName": item.product_name,
        "targetPrice": item.target_price,
        "timestamp": item.created_at,
    }


class TrackingStore(BaseClient):
    """Blocking adapter for the three tracking webhooks."""

    def __init__(
        self,
        add_url: str | None = None,
        list_url: str | None = None,
        remove_url: str | None = None,
    ) -> None:
        super().__init__("tracking")
        self.add_url = Settings.TRACK_ADD_URL if add_url is None else add_url
        self.list_url = (
            Settings.TRACK_LIST_URL if list_url is None else list_url
        )
        self.remove_url = (
            Settings.TRACK_REMOVE_URL if remove_url is None else remove_url
        )

    def add(self, item: TrackedItem) -> None:
        """Store a new tracked item; HTTP 200 is the only success."""
        self._post_expect_ok(self.add_url, to_wire(item))
        self.logger.info(
            "[tracking] Added %d '%s' @ %s",
            item.id,
            item.product_name,
            item.target_price,
        )

    def list_items(self) -> list[TrackedItem]:
        """Fetch the full tracked collection."""
        data = self._get_json(self.list_url)
        if not isinstance(data, list):
            raise TrackingFormatError("Tracked list is not an array")
        items = [from_wire(raw) for raw in data]
        self.logger.info("[tracking] Listed %d items", len(items))
        return items

    def remove(self, item_id: int) -> None:
        """Delete the tracked item ``item_id``; HTTP 200 is success."""
        self._post_expect_ok(self.remove_url, {"id": item_id})
        self.logger.info("[tracking] Removed %d", item_id)
