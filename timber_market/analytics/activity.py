"""
Activity figures for platform reports.

Monthly counts of new listings and completed deals, and per-company activity
for the admin user analysis. Like the rest of the analytics package these take
already-loaded records (models or plain mappings) and never raise on
malformed fields.
"""

from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field

from .aggregation import get_field, record_owner_id, record_volume
from .volume import round_half_up

COMPLETED_STATUS = "completed"


class MonthlyActivity(BaseModel):
    """What happened on the platform during one calendar month."""

    year: int
    month: int = Field(..., ge=1, le=12)
    new_demands: int = 0
    new_stock_items: int = 0
    successful_matches: int = 0
    demanded_volume_m3: float = 0.0
    listed_volume_m3: float = 0.0

    @property
    def label(self) -> str:
        """Month name and year, e.g. "June 2024"."""
        return date(self.year, self.month, 1).strftime("%B %Y")


class CompanyActivity(BaseModel):
    """Listing activity of one company."""

    company_id: str
    company_name: str
    role: str
    demands: int = 0
    stock_items: int = 0
    volume_m3: float = 0.0
    last_activity: Optional[datetime] = None


def read_timestamp(value: Any) -> Optional[datetime]:
    """A datetime from a model field or an ISO string, None if unreadable."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def _status_value(record: Any) -> str:
    status = get_field(record, "status")
    return str(getattr(status, "value", status) or "").lower()


def _in_month(record: Any, field: str, year: int, month: int) -> bool:
    stamp = read_timestamp(get_field(record, field))
    return stamp is not None and stamp.year == year and stamp.month == month


def monthly_activity(
    demands: Iterable[Any],
    stock: Iterable[Any],
    year: int,
    month: int,
) -> MonthlyActivity:
    """
    Count the listings created in one month.

    A successful match is a demand submitted that month which has reached
    the completed status.

    Args:
        demands: Demand records with submission_date
        stock: Stock records with upload_date
        year: Calendar year
        month: Calendar month, 1-12

    Returns:
        MonthlyActivity with volumes rounded to 2 decimals
    """
    new_demands = [d for d in demands or [] if _in_month(d, "submission_date", year, month)]
    new_stock = [s for s in stock or [] if _in_month(s, "upload_date", year, month)]

    return MonthlyActivity(
        year=year,
        month=month,
        new_demands=len(new_demands),
        new_stock_items=len(new_stock),
        successful_matches=sum(1 for d in new_demands if _status_value(d) == COMPLETED_STATUS),
        demanded_volume_m3=round_half_up(sum(record_volume(d) for d in new_demands), 2),
        listed_volume_m3=round_half_up(sum(record_volume(s) for s in new_stock), 2),
    )


def company_activity(
    companies: Iterable[Any],
    demands: Iterable[Any],
    stock: Iterable[Any],
) -> List[CompanyActivity]:
    """
    Per-company listing counts, volume and latest listing date.

    Companies keep their input order; records of unknown companies are
    ignored.
    """
    rows = {}
    for company in companies or []:
        company_id = get_field(company, "id")
        if not company_id:
            continue
        role = get_field(company, "role")
        rows[company_id] = CompanyActivity(
            company_id=company_id,
            company_name=get_field(company, "company_name") or company_id,
            role=str(getattr(role, "value", role) or ""),
        )

    for records, counter, date_field in (
        (demands, "demands", "submission_date"),
        (stock, "stock_items", "upload_date"),
    ):
        for record in records or []:
            row = rows.get(record_owner_id(record))
            if row is None:
                continue
            setattr(row, counter, getattr(row, counter) + 1)
            row.volume_m3 = round_half_up(row.volume_m3 + record_volume(record), 2)
            stamp = read_timestamp(get_field(record, date_field))
            if stamp is not None and (row.last_activity is None or stamp > row.last_activity):
                row.last_activity = stamp

    return list(rows.values())
