"""
Role-gated view models, one composer per screen.

Each composer takes the session context, switches once on its Role and
returns a plain dict ready to be serialised. Data is fetched fresh on
every call.
"""
from dataclasses import asdict, dataclass
from typing import List, Optional

from ..auth.session import Role, SessionContext
from ..config import settings
from .due_dates import DateLike, classify_invoice
from .filters import FilterCriteria, filter_invoices, filter_rows
from .relations import attach_reporters
from .stats import aggregate, issue_counts


RECENT_LIMIT = 5


@dataclass(frozen=True)
class NavLink:
    path: str
    label: str


def navigation(role: Role) -> List[dict]:
    if role is Role.ADMIN:
        links = [
            NavLink("/", "Dashboard"),
            NavLink("/invoices", "Invoices"),
            NavLink("/issues", "Issue Reports"),
            NavLink("/ledger", "Digital Ledger"),
            NavLink("/calendar", "Calendar"),
            NavLink("/users", "Users"),
        ]
    else:
        links = [
            NavLink("/", "Dashboard"),
            NavLink("/issues", "Report Issue"),
        ]
    return [asdict(link) for link in links]


def invoice_view(row: dict, now: DateLike) -> dict:
    return {**row, "due": classify_invoice(row, now).as_dict()}


def own_issues(ctx: SessionContext) -> List[dict]:
    return ctx.store.select("issue_reports", eq={"reported_by": ctx.user_id}, order_by="created_at", desc=True)


def dashboard_view(ctx: SessionContext, now: DateLike) -> dict:
    if ctx.role is Role.ADMIN:
        invoices = ctx.store.select("invoices", order_by="created_at", desc=True)
        issues = ctx.store.select("issue_reports", order_by="created_at", desc=True)
        return {
            "role": ctx.role.value,
            "stats": aggregate(invoices, issues, now).as_dict(),
            "recent_invoices": [invoice_view(i, now) for i in invoices[:RECENT_LIMIT]],
            "recent_issues": issues[:RECENT_LIMIT],
        }
    issues = own_issues(ctx)
    return {
        "role": ctx.role.value,
        "counts": issue_counts(issues).as_dict(),
        "issues": issues,
    }


def invoices_view(ctx: SessionContext, status: Optional[str], now: DateLike) -> List[dict]:
    rows = ctx.store.select("invoices", order_by="due_date")
    return [invoice_view(i, now) for i in filter_invoices(rows, status, now)]


def issues_view(ctx: SessionContext, criteria: FilterCriteria) -> dict:
    if ctx.role is Role.ADMIN:
        rows = attach_reporters(ctx.store, ctx.store.select("issue_reports", order_by="created_at", desc=True))
        return {
            "role": ctx.role.value,
            "issues": filter_rows(rows, criteria),
            "departments": list(settings.departments),
            "can_manage": True,
        }
    return {"role": ctx.role.value, "issues": own_issues(ctx), "can_manage": False}


def ledger_view(ctx: SessionContext, category: Optional[str]) -> dict:
    rows = ctx.store.select("ledger_notes", order_by="created_at", desc=True)
    return {
        "notes": filter_rows(rows, FilterCriteria(category=category)),
        "can_edit": ctx.role is Role.ADMIN,
    }
