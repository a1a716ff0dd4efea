from dataclasses import dataclass
from typing import Iterable, List, Optional

from .due_dates import Bucket, DateLike, classify_invoice


ALL = "all"


@dataclass(frozen=True)
class FilterCriteria:
    status: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None


def _active(value: Optional[str]) -> bool:
    return value is not None and value != "" and value != ALL


def row_department(row: dict) -> Optional[str]:
    # the row's own department wins over the reporter profile's
    if row.get("department"):
        return row["department"]
    reporter = row.get("reporter") or {}
    return reporter.get("department")


def narrows(criteria: FilterCriteria) -> bool:
    return _active(criteria.status) or _active(criteria.department) or _active(criteria.category)


def matches(row: dict, criteria: FilterCriteria) -> bool:
    if _active(criteria.status) and row.get("status") != criteria.status:
        return False
    if _active(criteria.department) and row_department(row) != criteria.department:
        return False
    if _active(criteria.category) and row.get("category") != criteria.category:
        return False
    return True


def filter_rows(rows: Iterable[dict], criteria: FilterCriteria) -> List[dict]:
    return [row for row in rows if matches(row, criteria)]


def filter_invoices(rows: Iterable[dict], status: Optional[str], now: DateLike) -> List[dict]:
    """Invoice list filter; "overdue" is derived from the due date, not stored."""
    if status == "overdue":
        return [row for row in rows if classify_invoice(row, now).bucket is Bucket.OVERDUE]
    return filter_rows(rows, FilterCriteria(status=status))
