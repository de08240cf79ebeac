"""
Company service.

Registers customer and manufacturer companies. Demands and stock refer to
companies by id only, so removing or renaming a company never touches them.
"""

from typing import List, Optional, Union

from pydantic import ValidationError

from ..analytics import resolve_company_name
from ..database.repository import MarketplaceRepository
from ..models import TRADING_ROLES, ActionType, Actor, Address, Company, UserRole, coerce_status
from ..utils import AuditLogger, get_logger


class CompanyValidationError(ValueError):
    """Raised when company data is rejected."""
    pass


class CompanyService:
    """Service for registered companies."""

    def __init__(self, repository: MarketplaceRepository) -> None:
        """
        Initialize company service.

        Args:
            repository: Marketplace repository
        """
        self.repository = repository
        self.logger = get_logger("company_service")
        self.audit_logger = AuditLogger(repository.db_manager)

    def add_company(
        self,
        name: str,
        role: Union[UserRole, str],
        address: Optional[Address] = None,
        contact_person: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Company:
        """
        Register a new company.

        Args:
            name: Company name, unique regardless of case
            role: CUSTOMER or MANUFACTURER
            address: Postal address (optional)
            contact_person: Contact name (optional)
            email: Contact email (optional)

        Returns:
            The stored Company

        Raises:
            CompanyValidationError: If the name is blank or taken, or the role
                is not a trading role
        """
        name = (name or "").strip()
        if not name:
            raise CompanyValidationError("Company name is required")

        try:
            role = coerce_status(role, UserRole)
        except ValueError as e:
            raise CompanyValidationError(str(e)) from e
        if role not in TRADING_ROLES:
            raise CompanyValidationError(
                f"Company role must be one of {[r.value for r in TRADING_ROLES]}"
            )

        companies = self.repository.load_companies()
        if any(c.company_name.lower() == name.lower() for c in companies):
            raise CompanyValidationError(f"A company named '{name}' already exists")

        try:
            company = Company(
                company_name=name,
                role=role,
                address=address,
                contact_person=(contact_person or "").strip() or None,
                email=(email or "").strip() or None,
            )
        except ValidationError as e:
            raise CompanyValidationError(f"Invalid company data: {e}") from e

        companies.append(company)
        self.repository.save_companies(companies)

        self.audit_logger.log_action(
            action_type=ActionType.COMPANY_ADDED,
            actor=Actor.ADMIN,
            details={"company_name": company.company_name, "role": company.role.value},
            company_id=company.id,
        )

        self.logger.info(f"Added {company.role.value} company '{company.company_name}' ({company.id})")
        return company

    def get_company(self, company_id: str) -> Optional[Company]:
        """
        Get a company by ID.

        Returns:
            Company or None if not found
        """
        for company in self.repository.load_companies():
            if company.id == company_id:
                return company
        return None

    def list_companies(self, role: Optional[Union[UserRole, str]] = None) -> List[Company]:
        """
        List companies in registration order.

        Args:
            role: Only companies with this role

        Returns:
            List of Companies
        """
        companies = self.repository.load_companies()
        if role is not None:
            wanted = coerce_status(role, UserRole)
            companies = [c for c in companies if c.role == wanted]
        return companies

    def company_name(self, company_id: Optional[str]) -> str:
        """Display name for a company id, or "Unknown company"."""
        return resolve_company_name(self.repository.load_companies(), company_id)
