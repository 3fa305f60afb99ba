# src/models/tracked_item.py

"""Tracked item model mirrored from the remote tracking store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackedItem:
    """A product the user watches against a target price."""

    id: int
    product_name: str
    target_price: float
    created_at: str
