# src/clients/catalog_gateway.py

"""Client for the remote catalog search webhook."""

from typing import Any

from src.clients.base_client import BaseClient, RemoteError, to_number
from src.config.settings import Settings
from src.models.product import Product


class CatalogGateway(BaseClient):
    """Posts a free-text query and parses the matching products.

    The webhook answers with a JSON array whose first element carries a
    ``products`` list of ``{productName, salePrice, link}`` objects.
    """

    def __init__(self, search_url: str | None = None) -> None:
        super().__init__("catalog")
        self.search_url = (
            Settings.SEARCH_URL if search_url is None else search_url
        )

    @staticmethod
    def _parse_product(raw: Any) -> Product:
        """Parse a single product object into a Product."""
        if not isinstance(raw, dict):
            raise RemoteError(f"Product entry is not an object: {raw!r}")
        name = raw.get("productName")
        if not isinstance(name, str) or not name:
            raise RemoteError(f"Product entry without productName: {raw!r}")
        try:
            price = to_number(raw.get("salePrice"))
        except (TypeError, ValueError) as exc:
            raise RemoteError(
                f"Product '{name}' has an invalid salePrice"
            ) from exc
        link = raw.get("link") or ""
        return Product(name=name, price=price, detail_link=str(link))

    @classmethod
    def extract_products(cls, data: Any) -> list[Product]:
        """Pull the product list out of a decoded search response.

        An absent, null or empty ``products`` field means no matches and
        yields ``[]``.  Any other shape deviation raises RemoteError.
        """
        if not isinstance(data, list) or not data:
            raise RemoteError("Search response is not a non-empty array")
        head = data[0]
        if not isinstance(head, dict):
            raise RemoteError("Search response head is not an object")
        raw_products = head.get("products")
        if raw_products is None:
            return []
        if not isinstance(raw_products, list):
            raise RemoteError("'products' is not an array")
        return [cls._parse_product(raw) for raw in raw_products]

    def search(self, query: str) -> list[Product]:
        """Search the catalog for ``query``; blocking."""
        data = self._post_json(self.search_url, {"query": query})
        products = self.extract_products(data)
        self.logger.info(
            "[catalog] '%s' matched %d products", query, len(products)
        )
        return products
