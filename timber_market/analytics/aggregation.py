"""
Status and volume aggregation over demand and stock listings.

Every function takes already-loaded collections and returns derived rows for
charts and summaries. Records may be pydantic models or plain mappings (as
read from stored JSON). Malformed fields are treated as missing, never as
errors.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Type, Union

from pydantic import BaseModel, Field

from .volume import parse_decimal, round_half_up

UNKNOWN_COMPANY = "Unknown company"
LABEL_MAX_LENGTH = 15
DEFAULT_TOP_N = 5


class StatusCount(BaseModel):
    """One bar of a status chart."""

    status: Any
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0.0)


class StatusSummary(BaseModel):
    """Per-status counts plus the number of records they were taken from."""

    rows: List[StatusCount] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)

    @property
    def is_empty(self) -> bool:
        """True when there were no records at all (not merely zero counts)."""
        return self.total == 0

    def count_for(self, status: Any) -> int:
        """Count for a status, 0 if it is not one of the rows."""
        for row in self.rows:
            if row.status == status:
                return row.count
        return 0


class ChartPoint(BaseModel):
    """Labelled value for a bar chart."""

    label: str
    value: float


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a model or a mapping."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def truncate_label(text: Any, max_length: int = LABEL_MAX_LENGTH) -> str:
    """
    Shorten a display label to at most max_length characters.

    Longer labels keep their first max_length - 3 characters followed by "...".
    """
    label = "" if text is None else str(text)
    if len(label) <= max_length:
        return label
    return f"{label[:max_length - 3]}..."


def _coerce_member(value: Any, members: Sequence[Any]) -> Any:
    """Match a raw status value to one of the members, or None."""
    if value is None:
        return None
    for member in members:
        if value == member:
            return member
        if isinstance(member, Enum):
            if value == member.value or value == member.name:
                return member
            if isinstance(value, str) and isinstance(member.value, str):
                if value.lower() in (member.value.lower(), member.name.lower()):
                    return member
    return None


def count_by_value(
    records: Iterable[Any],
    field: str,
    values: Union[Type[Enum], Iterable[Any]],
) -> StatusSummary:
    """
    Count records by the value of one field, over a fixed set of values.

    Args:
        records: Records to count
        field: Field name holding the categorical value
        values: All possible values in display order (an Enum class or a sequence)

    Returns:
        StatusSummary with one row per value, in the given order
    """
    members = list(values)
    counts: Dict[int, int] = {index: 0 for index in range(len(members))}
    total = 0

    for record in records or []:
        total += 1
        member = _coerce_member(get_field(record, field), members)
        if member is not None:
            counts[members.index(member)] += 1

    rows = []
    for index, member in enumerate(members):
        count = counts[index]
        percentage = round_half_up(count / total * 100, 1) if total > 0 else 0.0
        rows.append(StatusCount(status=member, count=count, percentage=percentage))

    return StatusSummary(rows=rows, total=total)


def summarize_status(
    records: Iterable[Any],
    statuses: Union[Type[Enum], Iterable[Any]],
) -> StatusSummary:
    """
    Count records per status for a fixed-order status chart.

    Every status gets a row, including those with no records. Percentages are
    rounded to one decimal; when there are no records every percentage is 0.

    Args:
        records: Demand or stock records carrying a "status" field
        statuses: All statuses in canonical declaration order

    Returns:
        StatusSummary(rows, total)
    """
    return count_by_value(records, "status", statuses)


def record_volume(record: Any) -> float:
    """Volume of a record in m³, 0.0 if missing or malformed."""
    volume = parse_decimal(get_field(record, "cubic_meters"))
    if volume is None or volume <= 0:
        return 0.0
    return volume


def record_owner_id(record: Any) -> Optional[str]:
    """Owning company id of a demand or stock record."""
    for name in ("owner_company_id", "submitted_by_company_id", "uploaded_by_company_id"):
        owner = get_field(record, name)
        if owner:
            return str(owner)
    return None


def sum_volumes_by_company(records: Iterable[Any]) -> Dict[str, float]:
    """Total record volume per owning company id; unowned records are skipped."""
    totals: Dict[str, float] = {}
    for record in records or []:
        owner = record_owner_id(record)
        volume = record_volume(record)
        if owner and volume:
            totals[owner] = totals.get(owner, 0.0) + volume
    return totals


def company_total_volume(records: Iterable[Any], company_id: str) -> float:
    """Total volume owned by one company, rounded to 2 decimals."""
    return round_half_up(sum_volumes_by_company(records).get(company_id, 0.0), 2)


def resolve_company_name(companies: Iterable[Any], company_id: Optional[str]) -> str:
    """
    Look up a company's display name by id.

    Returns UNKNOWN_COMPANY when the id is missing or matches no company.
    """
    if not company_id:
        return UNKNOWN_COMPANY
    for company in companies or []:
        if get_field(company, "id") == company_id:
            return get_field(company, "company_name") or UNKNOWN_COMPANY
    return UNKNOWN_COMPANY


def rank_companies_by_volume(
    companies: Iterable[Any],
    records: Iterable[Any],
    top_n: int = DEFAULT_TOP_N,
    role: Any = None,
) -> List[ChartPoint]:
    """
    Rank companies by the total volume of the records they own.

    Companies with no volume are left out. Ties keep the order of the
    companies argument.

    Args:
        companies: Candidate companies
        records: Demand or stock records
        top_n: Maximum number of companies to return
        role: If given, only companies with this role are ranked

    Returns:
        ChartPoint per company, highest volume first
    """
    if top_n is None or top_n <= 0:
        return []

    totals = sum_volumes_by_company(records)

    ranked = []
    for company in companies or []:
        if role is not None and _coerce_member(get_field(company, "role"), [role]) is None:
            continue
        volume = totals.get(get_field(company, "id"), 0.0)
        if volume > 0:
            ranked.append((company, volume))

    # sorted() is stable, so equal volumes keep their input order
    ranked = sorted(ranked, key=lambda pair: pair[1], reverse=True)[:top_n]

    return [
        ChartPoint(
            label=truncate_label(get_field(company, "company_name")),
            value=round_half_up(volume, 2),
        )
        for company, volume in ranked
    ]
