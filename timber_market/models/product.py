"""
Timber listing data models.

Defines product features shared by customer demands and manufacturer stock.
"""

import time
import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, computed_field, field_validator

from ..analytics.volume import calculate_cubic_meters, parse_decimal, parse_integer

E = TypeVar("E", bound=Enum)


def generate_record_id(prefix: str) -> str:
    """Generate a listing ID such as DEM-1718000000000-3fa29c1e."""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class DiameterType(str, Enum):
    """Where on the log the diameter is measured."""
    MID = "mid"
    TOP = "top"
    CHEST = "chest"


class DemandStatus(str, Enum):
    """Demand status enumeration, in display order."""
    RECEIVED = "received"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class StockStatus(str, Enum):
    """Stock status enumeration, in display order."""
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


class ProductFeatures(BaseModel):
    """Dimensions and quantity of a batch of logs."""

    diameter_type: Optional[str] = Field(None, max_length=50)
    diameter_from: Optional[float] = None  # cm
    diameter_to: Optional[float] = None  # cm
    length: Optional[float] = None  # m
    quantity: Optional[int] = None  # pieces
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator('diameter_from', 'diameter_to', 'length', mode='before')
    @classmethod
    def parse_decimal_input(cls, v: Any) -> Optional[float]:
        """Read form input leniently; unreadable input becomes None."""
        return parse_decimal(v)

    @field_validator('quantity', mode='before')
    @classmethod
    def parse_quantity_input(cls, v: Any) -> Optional[int]:
        """Read piece count leniently, truncating fractions."""
        return parse_integer(v)

    @field_validator('diameter_type', 'notes', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        """Treat blank text as missing."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @computed_field
    @property
    def cubic_meters(self) -> float:
        """Total volume in m³, always derived from the dimensions."""
        return calculate_cubic_meters(
            self.diameter_from, self.diameter_to, self.length, self.quantity
        )

    def has_dimensions(self) -> bool:
        """Check that every field needed to describe the product is filled in."""
        return bool(
            self.diameter_type
            and self.diameter_from is not None
            and self.diameter_to is not None
            and self.length is not None
            and self.quantity is not None
        )

    def describe(self) -> str:
        """Short product description, e.g. 'mid Ø14-18cm, 4m (175 pcs)'."""
        return (
            f"{self.diameter_type or 'n/a'} "
            f"Ø{_fmt(self.diameter_from)}-{_fmt(self.diameter_to)}cm, "
            f"{_fmt(self.length)}m ({_fmt(self.quantity)} pcs)"
        )

    def features(self) -> "ProductFeatures":
        """Plain product features without listing metadata."""
        return ProductFeatures(
            diameter_type=self.diameter_type,
            diameter_from=self.diameter_from,
            diameter_to=self.diameter_to,
            length=self.length,
            quantity=self.quantity,
            notes=self.notes,
        )

    class Config:
        """Pydantic configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "diameter_type": "mid",
                "diameter_from": 14,
                "diameter_to": 18,
                "length": 4,
                "quantity": 175,
                "notes": "Debarked, sanded acacia posts"
            }
        }


class DemandItem(ProductFeatures):
    """A customer's request for timber."""

    id: str = Field(default_factory=lambda: generate_record_id("DEM"))
    submission_date: datetime = Field(default_factory=datetime.now)
    status: DemandStatus = Field(default=DemandStatus.RECEIVED)
    submitted_by_company_id: Optional[str] = None
    submitted_by_company_name: Optional[str] = None

    @property
    def owner_company_id(self) -> Optional[str]:
        return self.submitted_by_company_id

    def with_status(self, status: DemandStatus) -> "DemandItem":
        """Copy of this demand with a new status."""
        return self.model_copy(update={"status": status})


class StockItem(ProductFeatures):
    """A manufacturer's listed stock."""

    id: str = Field(default_factory=lambda: generate_record_id("STK"))
    upload_date: datetime = Field(default_factory=datetime.now)
    status: StockStatus = Field(default=StockStatus.AVAILABLE)
    price: Optional[str] = Field(None, max_length=200)  # free text, e.g. "120 EUR/m³"
    sustainability_info: Optional[str] = Field(None, max_length=2000)
    uploaded_by_company_id: Optional[str] = None
    uploaded_by_company_name: Optional[str] = None

    @property
    def owner_company_id(self) -> Optional[str]:
        return self.uploaded_by_company_id

    def with_status(self, status: StockStatus) -> "StockItem":
        """Copy of this stock item with a new status."""
        return self.model_copy(update={"status": status})


def coerce_status(value: Any, enum_cls: Type[E]) -> E:
    """
    Turn a status given as a member, value or name into an enum member.

    Raises:
        ValueError: If the value is not one of the enum's statuses
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        for member in enum_cls:
            if value.strip().lower() in (member.value.lower(), member.name.lower()):
                return member
    raise ValueError(
        f"Unknown status {value!r}. Expected one of {[m.value for m in enum_cls]}"
    )


def as_features(features: Union[ProductFeatures, Mapping[str, Any]]) -> ProductFeatures:
    """Accept product features as a model or as raw form data."""
    if isinstance(features, ProductFeatures):
        return features.features()
    return ProductFeatures.model_validate(dict(features))


def _fmt(value: Any) -> str:
    if value is None:
        return "?"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
