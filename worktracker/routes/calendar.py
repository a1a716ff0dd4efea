from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.session import SessionContext, require_admin
from ..schemas.calendar import CalendarEventCreate
from ..services.calendar_grid import build_month, day_items
from ..services.due_dates import today_in


router = APIRouter(prefix="/calendar", tags=["calendar"])


def _rows(ctx: SessionContext):
    events = ctx.store.select("calendar_events", order_by="event_date")
    # paid invoices are off the calendar
    invoices = ctx.store.select("invoices", neq={"status": "paid"})
    return events, invoices


@router.get("/month")
def month_view(
    year: Optional[int] = Query(default=None, ge=1, le=9999),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    ctx: SessionContext = Depends(require_admin),
):
    today = today_in()
    events, invoices = _rows(ctx)
    view = build_month(year or today.year, month or today.month, events, invoices)
    return {**view.as_dict(), "today": today.isoformat()}


@router.get("/day/{day}")
def day_view(day: date, ctx: SessionContext = Depends(require_admin)):
    events, invoices = _rows(ctx)
    return day_items(day, events, invoices).as_dict()


@router.post("/events", status_code=201)
def create_event(payload: CalendarEventCreate, ctx: SessionContext = Depends(require_admin)):
    return ctx.store.insert("calendar_events", {**payload.model_dump(mode="json"), "created_by": ctx.user_id})
