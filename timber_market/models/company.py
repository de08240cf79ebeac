"""
Company data models.

Customers and manufacturers trading on the marketplace.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .product import generate_record_id


class UserRole(str, Enum):
    """Marketplace roles."""
    ADMIN = "admin"
    CUSTOMER = "customer"
    MANUFACTURER = "manufacturer"


TRADING_ROLES = (UserRole.CUSTOMER, UserRole.MANUFACTURER)


class Address(BaseModel):
    """Postal address of a company site."""

    street: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)

    def one_line(self) -> str:
        """Address as a single comma-separated line, skipping empty parts."""
        parts = [self.zip_code, self.city, self.street, self.country]
        return ", ".join(part for part in parts if part)

    class Config:
        frozen = True


class Company(BaseModel):
    """A customer or manufacturer company."""

    id: str = Field(default_factory=lambda: generate_record_id("comp"))
    company_name: str = Field(..., min_length=1, max_length=200)
    role: UserRole
    contact_person: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    address: Optional[Address] = None

    @field_validator('company_name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Trim surrounding whitespace; a blank name is rejected."""
        v = v.strip()
        if not v:
            raise ValueError('company_name must not be blank')
        return v

    @field_validator('role')
    @classmethod
    def validate_trading_role(cls, v: UserRole) -> UserRole:
        """Only customers and manufacturers are registered as companies."""
        if v not in TRADING_ROLES:
            raise ValueError(f'Company role must be one of {[r.value for r in TRADING_ROLES]}')
        return v

    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "company_name": "Forest King Timber Kft.",
                "role": "manufacturer",
                "address": {
                    "street": "Fő utca 1.",
                    "city": "Sopron",
                    "zip_code": "9400",
                    "country": "Hungary"
                }
            }
        }
