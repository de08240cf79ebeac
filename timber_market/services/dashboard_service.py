"""
Dashboard service.

Read-only figures for the admin dashboard: status charts, company volume
rankings and the stock diameter-type breakdown.
"""

from typing import Dict, List, Optional, Union

from ..analytics import (
    ChartPoint,
    StatusSummary,
    count_by_value,
    rank_companies_by_volume,
    round_half_up,
    sum_volumes_by_company,
    summarize_status,
)
from ..config import get_config_manager
from ..database.repository import MarketplaceRepository
from ..models import DemandStatus, DiameterType, StockStatus, UserRole, coerce_status
from ..utils import get_logger


class DashboardService:
    """Aggregated marketplace figures."""

    def __init__(self, repository: MarketplaceRepository) -> None:
        self.repository = repository
        self.logger = get_logger("dashboard_service")

    def order_status_summary(self) -> StatusSummary:
        """Demand count per status, every status included."""
        return summarize_status(self.repository.load_demands(), DemandStatus)

    def stock_status_summary(self) -> StatusSummary:
        """Stock count per status, every status included."""
        return summarize_status(self.repository.load_stock(), StockStatus)

    def stock_diameter_type_breakdown(self) -> StatusSummary:
        """Stock count per diameter type (mid, top, chest)."""
        return count_by_value(self.repository.load_stock(), "diameter_type", DiameterType)

    def top_companies_by_volume(
        self,
        role: Union[UserRole, str],
        top_n: Optional[int] = None,
    ) -> List[ChartPoint]:
        """
        Rank companies of one role by volume.

        Customers are ranked by demanded volume, manufacturers by listed stock
        volume.

        Args:
            role: CUSTOMER or MANUFACTURER
            top_n: Number of companies; defaults to market.top_n from config

        Returns:
            ChartPoints, highest volume first
        """
        role = coerce_status(role, UserRole)
        if top_n is None:
            top_n = get_config_manager().market_settings().top_n

        records = (
            self.repository.load_demands()
            if role == UserRole.CUSTOMER
            else self.repository.load_stock()
        )
        ranking = rank_companies_by_volume(
            self.repository.load_companies(), records, top_n=top_n, role=role
        )
        self.logger.debug(f"Ranked {len(ranking)} {role.value} companies by volume")
        return ranking

    def company_volumes(self, role: Union[UserRole, str]) -> Dict[str, float]:
        """
        Total volume per company id for every company of one role.

        Companies without records are listed with 0.0.
        """
        role = coerce_status(role, UserRole)
        records = (
            self.repository.load_demands()
            if role == UserRole.CUSTOMER
            else self.repository.load_stock()
        )
        totals = sum_volumes_by_company(records)
        return {
            company.id: round_half_up(totals.get(company.id, 0.0), 2)
            for company in self.repository.load_companies()
            if company.role == role
        }
