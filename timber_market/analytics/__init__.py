"""
Listing and aggregation utilities: volume calculation, status summaries,
company volume rankings and monthly activity figures.
"""

from .activity import (
    CompanyActivity,
    MonthlyActivity,
    company_activity,
    monthly_activity,
    read_timestamp,
)
from .aggregation import (
    UNKNOWN_COMPANY,
    ChartPoint,
    StatusCount,
    StatusSummary,
    company_total_volume,
    count_by_value,
    rank_companies_by_volume,
    resolve_company_name,
    sum_volumes_by_company,
    summarize_status,
    truncate_label,
)
from .volume import (
    calculate_cubic_meters,
    parse_decimal,
    parse_integer,
    round_half_up,
)

__all__ = [
    # Volume
    "calculate_cubic_meters",
    "parse_decimal",
    "parse_integer",
    "round_half_up",
    # Aggregation
    "ChartPoint",
    "StatusCount",
    "StatusSummary",
    "UNKNOWN_COMPANY",
    "company_total_volume",
    "count_by_value",
    "rank_companies_by_volume",
    "resolve_company_name",
    "sum_volumes_by_company",
    "summarize_status",
    "truncate_label",
    # Activity
    "CompanyActivity",
    "MonthlyActivity",
    "company_activity",
    "monthly_activity",
    "read_timestamp",
]
