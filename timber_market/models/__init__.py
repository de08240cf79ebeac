"""
Data models for the timber marketplace.

This module exports all data models for easy import.
"""

from .ai_responses import (
    AIFailure,
    AlternativeProduct,
    CategorySuggestion,
    ComparisonDetails,
    CostEstimate,
    LabeledSection,
    LoadingPlan,
    LoadingPlanItem,
    MatchmakingSuggestion,
    MonthlyPlatformSummary,
    ProductComparison,
    StockSuggestion,
    Waypoint,
)
from .audit_log import (
    ActionType,
    Actor,
    AuditLog,
    Outcome,
)
from .company import (
    TRADING_ROLES,
    Address,
    Company,
    UserRole,
)
from .product import (
    DemandItem,
    DemandStatus,
    DiameterType,
    ProductFeatures,
    StockItem,
    StockStatus,
    as_features,
    coerce_status,
    generate_record_id,
)

__all__ = [
    # Listing models
    "ProductFeatures",
    "DemandItem",
    "DemandStatus",
    "StockItem",
    "StockStatus",
    "DiameterType",
    "generate_record_id",
    "coerce_status",
    "as_features",
    # Company models
    "Company",
    "Address",
    "UserRole",
    "TRADING_ROLES",
    # AI response models
    "AIFailure",
    "AlternativeProduct",
    "ComparisonDetails",
    "ProductComparison",
    "MatchmakingSuggestion",
    "StockSuggestion",
    "LoadingPlan",
    "LoadingPlanItem",
    "Waypoint",
    "LabeledSection",
    "CategorySuggestion",
    "MonthlyPlatformSummary",
    "CostEstimate",
    # Audit log models
    "AuditLog",
    "ActionType",
    "Actor",
    "Outcome",
]
