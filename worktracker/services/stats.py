from dataclasses import asdict, dataclass
from typing import Iterable, List

from .due_dates import Bucket, DateLike, classify_invoice


@dataclass(frozen=True)
class DashboardStats:
    total_invoices: int
    pending_invoices: int
    overdue_invoices: int
    due_soon_invoices: int
    open_issues: int
    resolved_issues: int

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class IssueCounts:
    total: int
    open: int
    resolved: int

    def as_dict(self) -> dict:
        return asdict(self)


def issue_counts(issues: Iterable[dict]) -> IssueCounts:
    rows = list(issues)
    resolved = sum(1 for i in rows if i.get("status") == "resolved")
    return IssueCounts(total=len(rows), open=len(rows) - resolved, resolved=resolved)


def aggregate(invoices: Iterable[dict], issues: Iterable[dict], now: DateLike) -> DashboardStats:
    """Summary counts over the full invoice and issue sets.

    Nothing is cached; call again whenever the rows change.
    """
    invoice_rows: List[dict] = list(invoices)
    buckets = [classify_invoice(i, now).bucket for i in invoice_rows]
    counts = issue_counts(issues)
    return DashboardStats(
        total_invoices=len(invoice_rows),
        pending_invoices=sum(1 for i in invoice_rows if i.get("status") == "pending"),
        overdue_invoices=buckets.count(Bucket.OVERDUE),
        due_soon_invoices=buckets.count(Bucket.DUE_SOON),
        open_issues=counts.open,
        resolved_issues=counts.resolved,
    )
