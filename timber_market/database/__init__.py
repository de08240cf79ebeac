"""
Persistence for the timber marketplace.
"""

from .db_manager import DatabaseManager, create_database_manager
from .repository import (
    COMPANIES_KEY,
    CUSTOMER_DEMANDS_KEY,
    MANUFACTURER_STOCK_KEY,
    MarketplaceRepository,
)

__all__ = [
    "DatabaseManager",
    "create_database_manager",
    "MarketplaceRepository",
    "CUSTOMER_DEMANDS_KEY",
    "MANUFACTURER_STOCK_KEY",
    "COMPANIES_KEY",
]
