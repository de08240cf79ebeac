"""
Demand service for customer timber requests.

Handles submission, listing and administrative status changes.
"""

from typing import Any, List, Mapping, Optional, Union

from ..analytics import company_total_volume
from ..database.repository import MarketplaceRepository
from ..models import ActionType, Actor, Company, DemandItem, DemandStatus, ProductFeatures
from ..models import as_features, coerce_status, generate_record_id
from ..utils import AuditLogger, get_logger


class DemandService:
    """Service for customer demands."""

    def __init__(self, repository: MarketplaceRepository) -> None:
        """
        Initialize demand service.

        Args:
            repository: Marketplace repository
        """
        self.repository = repository
        self.logger = get_logger("demand_service")
        self.audit_logger = AuditLogger(repository.db_manager)

    def submit_demand(
        self,
        features: Union[ProductFeatures, Mapping[str, Any]],
        company: Optional[Company] = None,
    ) -> DemandItem:
        """
        Submit a new demand.

        A demand submitted for a company is an administrator acting on that
        company's behalf; its ID carries the DEM-ADM prefix.

        Args:
            features: Product features from the demand form
            company: Company the demand is submitted for (optional)

        Returns:
            The stored DemandItem, status RECEIVED
        """
        product = as_features(features)
        demand = DemandItem(
            **product.model_dump(exclude={"cubic_meters"}),
            id=generate_record_id("DEM-ADM" if company else "DEM"),
            status=DemandStatus.RECEIVED,
            submitted_by_company_id=company.id if company else None,
            submitted_by_company_name=company.company_name if company else None,
        )

        demands = self.repository.load_demands()
        self.repository.save_demands([demand] + demands)

        self.audit_logger.log_action(
            action_type=ActionType.DEMAND_SUBMITTED,
            actor=Actor.ADMIN if company else Actor.CUSTOMER,
            details={"cubic_meters": demand.cubic_meters, "description": demand.describe()},
            record_id=demand.id,
            company_id=demand.submitted_by_company_id,
        )

        self.logger.info(f"Submitted demand {demand.id} ({demand.cubic_meters} m³)")
        return demand

    def get_demand(self, demand_id: str) -> Optional[DemandItem]:
        """
        Get a demand by ID.

        Returns:
            DemandItem or None if not found
        """
        for demand in self.repository.load_demands():
            if demand.id == demand_id:
                return demand
        return None

    def list_demands(
        self,
        status: Optional[Union[DemandStatus, str]] = None,
        company_id: Optional[str] = None,
    ) -> List[DemandItem]:
        """
        List demands, newest first, optionally filtered.

        Args:
            status: Only demands with this status
            company_id: Only demands submitted for this company

        Returns:
            List of DemandItems
        """
        demands = self.repository.load_demands()
        if status is not None:
            wanted = coerce_status(status, DemandStatus)
            demands = [d for d in demands if d.status == wanted]
        if company_id is not None:
            demands = [d for d in demands if d.submitted_by_company_id == company_id]
        return sorted(demands, key=lambda d: d.submission_date, reverse=True)

    def active_demands(self) -> List[DemandItem]:
        """Demands still waiting to be matched (status RECEIVED)."""
        return self.list_demands(status=DemandStatus.RECEIVED)

    def update_status(
        self,
        demand_id: str,
        new_status: Union[DemandStatus, str],
    ) -> Optional[DemandItem]:
        """
        Change the status of a demand.

        Any status may follow any other; only the value itself is checked.

        Args:
            demand_id: Demand ID
            new_status: New status

        Returns:
            Updated DemandItem, or None if no demand has this ID

        Raises:
            ValueError: If new_status is not a DemandStatus
        """
        status = coerce_status(new_status, DemandStatus)
        demands = self.repository.load_demands()

        for index, demand in enumerate(demands):
            if demand.id != demand_id:
                continue

            previous = demand.status
            updated = demand.with_status(status)
            demands[index] = updated
            self.repository.save_demands(demands)

            self.audit_logger.log_action(
                action_type=ActionType.DEMAND_STATUS_CHANGED,
                actor=Actor.ADMIN,
                details={"from": previous.value, "to": status.value},
                record_id=demand_id,
                company_id=demand.submitted_by_company_id,
            )
            self.logger.info(f"Demand {demand_id}: {previous.value} -> {status.value}")
            return updated

        self.logger.warning(f"Status change requested for unknown demand {demand_id}")
        return None

    def company_volume(self, company_id: str) -> float:
        """Total demanded volume of one company in m³."""
        return company_total_volume(self.repository.load_demands(), company_id)
