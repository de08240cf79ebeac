"""
Business logic services for the timber marketplace.
"""

from .base_llm_service import BaseLLMService
from .company_service import CompanyService, CompanyValidationError
from .dashboard_service import DashboardService
from .demand_service import DemandService
from .llm_factory import LLMProvider, create_llm_service
from .marketplace_assistant import MarketplaceAssistant
from .stock_service import StockService

__all__ = [
    "DemandService",
    "StockService",
    "CompanyService",
    "CompanyValidationError",
    "DashboardService",
    # AI
    "BaseLLMService",
    "LLMProvider",
    "create_llm_service",
    "MarketplaceAssistant",
]
