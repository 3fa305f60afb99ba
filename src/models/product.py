# src/models/product.py

"""Search result models produced by the catalog gateway."""

from dataclasses import dataclass


@dataclass
class Product:
    """A single catalog match returned by a search."""

    name: str
    price: float
    detail_link: str = ""


@dataclass(frozen=True)
class NoResults:
    """Placeholder shown in place of results when a search matched nothing.

    Deliberately not a :class:`Product`: renderers tell the two apart
    with ``isinstance`` and show ``message`` instead of a product card.
    """

    message: str


SearchEntry = Product | NoResults
