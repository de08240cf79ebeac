"""
Marketplace repository.

Demands, stock and companies are each stored as one JSON array under a fixed
key. Callers load a whole collection, work on it in memory and save the whole
collection back; there are no partial updates.
"""

import json
from typing import List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..models import Company, DemandItem, StockItem
from ..utils import get_logger
from .db_manager import DatabaseManager

CUSTOMER_DEMANDS_KEY = "customer-demands"
MANUFACTURER_STOCK_KEY = "manufacturer-stock"
COMPANIES_KEY = "companies"

M = TypeVar("M", bound=BaseModel)


class MarketplaceRepository:
    """Load and save full marketplace collections."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        """
        Initialize repository.

        Args:
            db_manager: Database manager instance
        """
        self.db_manager = db_manager
        self.logger = get_logger("repository")

    def _load(self, key: str, model: Type[M]) -> List[M]:
        raw = self.db_manager.get_value(key)
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.error(f"Stored collection '{key}' is not valid JSON: {e}")
            return []

        if not isinstance(data, list):
            self.logger.error(f"Stored collection '{key}' is not a list, ignoring it")
            return []

        records = []
        for index, entry in enumerate(data):
            try:
                records.append(model.model_validate(entry))
            except (ValidationError, ValueError, TypeError, OverflowError) as e:
                self.logger.warning(
                    f"Skipping invalid {model.__name__} at position {index} in '{key}': {e}"
                )
        return records

    def _save(self, key: str, records: List[BaseModel]) -> None:
        payload = json.dumps([record.model_dump(mode="json") for record in records])
        self.db_manager.set_value(key, payload)
        self.logger.debug(f"Saved {len(records)} records under '{key}'")

    def load_demands(self) -> List[DemandItem]:
        """All stored customer demands, newest first as saved."""
        return self._load(CUSTOMER_DEMANDS_KEY, DemandItem)

    def save_demands(self, demands: List[DemandItem]) -> None:
        self._save(CUSTOMER_DEMANDS_KEY, demands)

    def load_stock(self) -> List[StockItem]:
        """All stored manufacturer stock items."""
        return self._load(MANUFACTURER_STOCK_KEY, StockItem)

    def save_stock(self, stock_items: List[StockItem]) -> None:
        self._save(MANUFACTURER_STOCK_KEY, stock_items)

    def load_companies(self) -> List[Company]:
        """All registered companies, in registration order."""
        return self._load(COMPANIES_KEY, Company)

    def save_companies(self, companies: List[Company]) -> None:
        self._save(COMPANIES_KEY, companies)
