"""
Audit log data models.

Defines data structures for marketplace action logging.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    """Types of actions that can be logged."""
    # Demand actions
    DEMAND_SUBMITTED = "demand_submitted"
    DEMAND_STATUS_CHANGED = "demand_status_changed"

    # Stock actions
    STOCK_UPLOADED = "stock_uploaded"
    STOCK_STATUS_CHANGED = "stock_status_changed"

    # Company actions
    COMPANY_ADDED = "company_added"

    # AI assistant actions
    AI_REQUEST = "ai_request"


class Actor(str, Enum):
    """Who performed the action."""
    CUSTOMER = "customer"
    MANUFACTURER = "manufacturer"
    ADMIN = "admin"
    SYSTEM = "system"
    LLM = "llm"


class Outcome(str, Enum):
    """Result of the action."""
    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"


class AuditLog(BaseModel):
    """Represents a single audit log entry."""

    log_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=datetime.now)
    action_type: ActionType
    actor: Actor
    details: Dict[str, Any] = Field(default_factory=dict)
    outcome: Outcome = Field(default=Outcome.SUCCESS)
    record_id: Optional[str] = None  # Demand or stock item
    company_id: Optional[str] = None
    error_message: Optional[str] = None

    def to_readable_string(self) -> str:
        """Convert log entry to human-readable string."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        actor_str = self.actor.value.upper()
        action_str = self.action_type.value.replace("_", " ").title()
        outcome_str = self.outcome.value.upper()

        base = f"[{timestamp_str}] {actor_str}: {action_str} - {outcome_str}"
        if self.record_id:
            base += f" ({self.record_id})"
        if self.error_message:
            base += f" - Error: {self.error_message}"

        return base

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "action_type": "demand_status_changed",
                "actor": "admin",
                "details": {"from": "received", "to": "processing"},
                "outcome": "success",
                "record_id": "DEM-1718000000000-3fa29c1e"
            }
        }
