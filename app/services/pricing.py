# app/services/pricing.py
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Protocol

from app.database import FileBackedDB

logger = logging.getLogger(__name__)


class PriceLookupError(Exception):
    pass


class PriceStore(Protocol):
    def fetch_prices(self, ids: Iterable[str]) -> Dict[str, Decimal]:
        """Return id -> authoritative price (major units). Unknown ids are absent."""
        ...


class CatalogPriceStore:
    """Authoritative prices read from the `products` table."""

    def __init__(self, db: FileBackedDB, table: str = "products"):
        self.db = db
        self.table = table

    def fetch_prices(self, ids: Iterable[str]) -> Dict[str, Decimal]:
        ids = {str(i) for i in ids if i not in (None, "")}
        if not ids:
            return {}
        try:
            rows = self.db.get_records(self.table, "id", ids)
        except Exception as e:
            raise PriceLookupError(f"Price lookup failed: {e}") from e

        prices: Dict[str, Decimal] = {}
        for row in rows:
            raw = row.get("price")
            if raw in (None, ""):
                continue
            try:
                prices[str(row.get("id"))] = Decimal(str(raw))
            except InvalidOperation:
                logger.warning("Ignoring unparseable catalog price %r for product %s", raw, row.get("id"))
        return prices
