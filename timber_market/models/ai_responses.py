"""
AI assistant response models.

Each assistant feature asks the model for a specific JSON shape. Replies are
validated against these models; anything that does not fit becomes an
AIFailure instead of an exception.
"""

import uuid
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


def _short_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


class AIFailure(BaseModel):
    """An assistant feature that produced no usable result."""

    kind: Literal["failure"] = "failure"
    feature: str
    message: str
    raw_response: Optional[str] = None

    def __str__(self) -> str:
        return self.message


class AlternativeProduct(BaseModel):
    """A product the customer could buy instead of the one requested."""

    id: str = Field(default_factory=lambda: _short_id("alt"))
    name: str = Field(..., min_length=1)
    specs: str = ""


class ComparisonDetails(BaseModel):
    """One side of a product comparison."""

    name: str
    dimensions_quantity_notes: Optional[str] = None
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)


class ProductComparison(BaseModel):
    """Requested product compared with an alternative."""

    original: ComparisonDetails
    alternative: ComparisonDetails


class _ScoredSuggestion(BaseModel):
    reason: str = ""
    match_strength: Optional[str] = None
    similarity_score: Optional[float] = None

    @field_validator('match_strength', mode='before')
    @classmethod
    def stringify_strength(cls, v: Any) -> Optional[str]:
        """Models sometimes answer 85 instead of "85%"."""
        if v is None:
            return None
        return str(v)

    @field_validator('similarity_score')
    @classmethod
    def normalize_score(cls, v: Optional[float]) -> Optional[float]:
        """Bring the score into 0.0-1.0; percentages are scaled down."""
        if v is None:
            return None
        if v > 1.0:
            v = v / 100.0
        return max(0.0, min(1.0, v))


class MatchmakingSuggestion(_ScoredSuggestion):
    """A proposed pairing of a customer demand with manufacturer stock."""

    id: str = Field(default_factory=lambda: _short_id("match"))
    demand_id: str
    stock_id: str


class StockSuggestion(_ScoredSuggestion):
    """An available stock item suggested for a specific demand."""

    stock_item_id: str


class Waypoint(BaseModel):
    """A stop on a truck route."""

    name: str
    type: Literal["pickup", "dropoff"]
    order: int

    @field_validator('type', mode='before')
    @classmethod
    def strip_quotes(cls, v: Any) -> Any:
        """Models tend to echo the quoted literal from the prompt ("'pickup'")."""
        if isinstance(v, str):
            return v.strip().strip("'\"").lower()
        return v


class LoadingPlanItem(BaseModel):
    """A customer's share of the truck load."""

    name: str
    quality: Optional[str] = None
    volume_m3: Optional[str] = None
    density_ton_per_m3: Optional[str] = None
    weight_ton: Optional[str] = None
    loading_suggestion: Optional[str] = None
    destination_name: Optional[str] = None
    drop_off_order: Optional[int] = None
    notes_on_item: Optional[str] = None

    @field_validator('volume_m3', 'density_ton_per_m3', 'weight_ton', mode='before')
    @classmethod
    def stringify_measure(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return str(v)


class LoadingPlan(BaseModel):
    """Truck loading and routing plan."""

    id: str = Field(default_factory=lambda: _short_id("plan"))
    plan_details: str
    items: Union[List[LoadingPlanItem], str] = Field(default_factory=list)
    capacity_used: str = ""
    waypoints: List[Waypoint] = Field(default_factory=list)
    optimized_route_description: Optional[str] = None

    @field_validator('capacity_used', mode='before')
    @classmethod
    def stringify_capacity(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    def ordered_waypoints(self) -> List[Waypoint]:
        """Waypoints in route order."""
        return sorted(self.waypoints, key=lambda w: w.order)


class LabeledSection(BaseModel):
    """A labelled block of free text, e.g. 'Completeness: ...'."""

    label: str
    content: str

    def __str__(self) -> str:
        return f"{self.label} {self.content}".strip()


class CategorySuggestion(BaseModel):
    """A product category path, broadest level first."""

    path: List[str] = Field(..., min_length=1)

    @classmethod
    def from_text(cls, text: str) -> "CategorySuggestion":
        """Read a "Timber > Logs > Spruce" style path."""
        return cls(path=[part.strip() for part in text.split(">") if part.strip()])

    def __str__(self) -> str:
        return " > ".join(self.path)


class MonthlyPlatformSummary(BaseModel):
    """Platform activity figures for a month with the model's reading of them."""

    month: str
    new_demands: int = 0
    new_stock_items: int = 0
    successful_matches: int = 0
    ai_interpretation: str = ""


class CostEstimate(BaseModel):
    """Rough logistics cost for a single shipment."""

    id: str = Field(default_factory=lambda: _short_id("cost"))
    total_cost: str = Field(..., min_length=1)
    factors: List[str] = Field(default_factory=list)

    @field_validator('total_cost', mode='before')
    @classmethod
    def stringify_cost(cls, v: Any) -> Any:
        """Models sometimes answer a bare number."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v
