"""
Utility functions for the timber marketplace.
"""

from .logger import (
    AuditLogger,
    MarketLogger,
    get_audit_logger,
    get_logger,
    reset_loggers,
)

__all__ = [
    # Logging
    "MarketLogger",
    "AuditLogger",
    "get_logger",
    "get_audit_logger",
    "reset_loggers",
]
