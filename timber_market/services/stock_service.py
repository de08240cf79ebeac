"""
Stock service for manufacturer listings.

Handles stock uploads, listing and status changes.
"""

from typing import Any, List, Mapping, Optional, Union

from ..analytics import company_total_volume
from ..database.repository import MarketplaceRepository
from ..models import (
    ActionType,
    Actor,
    Company,
    ProductFeatures,
    StockItem,
    StockStatus,
    as_features,
    coerce_status,
    generate_record_id,
)
from ..utils import AuditLogger, get_logger


class StockService:
    """Service for manufacturer stock."""

    def __init__(self, repository: MarketplaceRepository) -> None:
        """
        Initialize stock service.

        Args:
            repository: Marketplace repository
        """
        self.repository = repository
        self.logger = get_logger("stock_service")
        self.audit_logger = AuditLogger(repository.db_manager)

    def upload_stock(
        self,
        features: Union[ProductFeatures, Mapping[str, Any]],
        price: Optional[str] = None,
        sustainability_info: Optional[str] = None,
        company: Optional[Company] = None,
    ) -> StockItem:
        """
        Upload a new stock item.

        Stock uploaded for a company is an administrator acting on that
        company's behalf; its ID carries the STK-ADM prefix.

        Args:
            features: Product features from the stock form
            price: Free-text price, e.g. "120 EUR/m³"
            sustainability_info: Certificates, harvesting notes
            company: Company the stock is uploaded for (optional)

        Returns:
            The stored StockItem, status AVAILABLE
        """
        product = as_features(features)
        item = StockItem(
            **product.model_dump(exclude={"cubic_meters"}),
            id=generate_record_id("STK-ADM" if company else "STK"),
            status=StockStatus.AVAILABLE,
            price=(price or "").strip() or None,
            sustainability_info=(sustainability_info or "").strip() or None,
            uploaded_by_company_id=company.id if company else None,
            uploaded_by_company_name=company.company_name if company else None,
        )

        stock_items = self.repository.load_stock()
        self.repository.save_stock([item] + stock_items)

        self.audit_logger.log_action(
            action_type=ActionType.STOCK_UPLOADED,
            actor=Actor.ADMIN if company else Actor.MANUFACTURER,
            details={
                "cubic_meters": item.cubic_meters,
                "description": item.describe(),
                "price": item.price,
            },
            record_id=item.id,
            company_id=item.uploaded_by_company_id,
        )

        self.logger.info(f"Uploaded stock {item.id} ({item.cubic_meters} m³)")
        return item

    def get_stock_item(self, stock_id: str) -> Optional[StockItem]:
        """
        Get a stock item by ID.

        Returns:
            StockItem or None if not found
        """
        for item in self.repository.load_stock():
            if item.id == stock_id:
                return item
        return None

    def list_stock(
        self,
        status: Optional[Union[StockStatus, str]] = None,
        company_id: Optional[str] = None,
    ) -> List[StockItem]:
        """
        List stock items, newest first, optionally filtered.

        Args:
            status: Only items with this status
            company_id: Only items uploaded for this company

        Returns:
            List of StockItems
        """
        stock_items = self.repository.load_stock()
        if status is not None:
            wanted = coerce_status(status, StockStatus)
            stock_items = [s for s in stock_items if s.status == wanted]
        if company_id is not None:
            stock_items = [s for s in stock_items if s.uploaded_by_company_id == company_id]
        return sorted(stock_items, key=lambda s: s.upload_date, reverse=True)

    def list_own_stock(self) -> List[StockItem]:
        """Stock uploaded by a manufacturer directly, not on behalf of a company."""
        return [s for s in self.list_stock() if not s.uploaded_by_company_id]

    def available_stock(self) -> List[StockItem]:
        """Stock that can still be matched (status AVAILABLE)."""
        return self.list_stock(status=StockStatus.AVAILABLE)

    def update_status(
        self,
        stock_id: str,
        new_status: Union[StockStatus, str],
    ) -> Optional[StockItem]:
        """
        Change the status of a stock item.

        Any status may follow any other; only the value itself is checked.

        Args:
            stock_id: Stock item ID
            new_status: New status

        Returns:
            Updated StockItem, or None if no item has this ID

        Raises:
            ValueError: If new_status is not a StockStatus
        """
        status = coerce_status(new_status, StockStatus)
        stock_items = self.repository.load_stock()

        for index, item in enumerate(stock_items):
            if item.id != stock_id:
                continue

            previous = item.status
            updated = item.with_status(status)
            stock_items[index] = updated
            self.repository.save_stock(stock_items)

            self.audit_logger.log_action(
                action_type=ActionType.STOCK_STATUS_CHANGED,
                actor=Actor.ADMIN,
                details={"from": previous.value, "to": status.value},
                record_id=stock_id,
                company_id=item.uploaded_by_company_id,
            )
            self.logger.info(f"Stock {stock_id}: {previous.value} -> {status.value}")
            return updated

        self.logger.warning(f"Status change requested for unknown stock item {stock_id}")
        return None

    def company_volume(self, company_id: str) -> float:
        """Total listed volume of one company in m³."""
        return company_total_volume(self.repository.load_stock(), company_id)
