import uuid
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from ..auth.session import SessionContext, require_admin
from ..config import settings
from ..schemas.invoices import InvoiceInput
from ..services.due_dates import today_in
from ..services.export import ExportFormat, export_invoices
from ..services.filters import filter_invoices
from ..services.issues import InvalidTransition, mark_paid_updates
from ..services.views import invoice_view, invoices_view


router = APIRouter(prefix="/invoices", tags=["invoices"])

InvoiceFilter = Query(default="all", pattern="^(all|pending|paid|overdue)$")


def _get_invoice(ctx: SessionContext, invoice_id: str) -> dict:
    try:
        uuid.UUID(str(invoice_id))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid invoice id") from exc
    row = ctx.store.get("invoices", invoice_id)
    if not row:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return row


def _invoice_values(payload: InvoiceInput) -> dict:
    today = today_in()
    values = payload.model_dump(mode="json")
    values["issue_date"] = values["issue_date"] or today.isoformat()
    values["due_date"] = values["due_date"] or (today + timedelta(days=settings.invoice_term_days)).isoformat()
    return values


@router.get("")
def list_invoices(status: str = InvoiceFilter, ctx: SessionContext = Depends(require_admin)):
    return invoices_view(ctx, status, today_in())


@router.get("/export")
def export(
    format: ExportFormat = ExportFormat.CSV,
    status: str = InvoiceFilter,
    start: Optional[str] = None,
    end: Optional[str] = None,
    ctx: SessionContext = Depends(require_admin),
):
    now = today_in()
    rows = filter_invoices(ctx.store.select("invoices", order_by="due_date"), status, now)
    try:
        content, filename, media_type = export_invoices(rows, format, now, status=status, start=start, end=end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(content=content, media_type=media_type, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.get("/{invoice_id}")
def get_invoice(invoice_id: str, ctx: SessionContext = Depends(require_admin)):
    return invoice_view(_get_invoice(ctx, invoice_id), today_in())


@router.post("", status_code=201)
def create_invoice(payload: InvoiceInput, ctx: SessionContext = Depends(require_admin)):
    row = ctx.store.insert("invoices", {**_invoice_values(payload), "created_by": ctx.user_id})
    return invoice_view(row, today_in())


@router.put("/{invoice_id}")
def update_invoice(invoice_id: str, payload: InvoiceInput, ctx: SessionContext = Depends(require_admin)):
    _get_invoice(ctx, invoice_id)
    row = ctx.store.update("invoices", invoice_id, _invoice_values(payload))
    if row is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice_view(row, today_in())


@router.post("/{invoice_id}/mark-paid")
def mark_paid(invoice_id: str, ctx: SessionContext = Depends(require_admin)):
    invoice = _get_invoice(ctx, invoice_id)
    try:
        updates = mark_paid_updates(invoice["status"])
    except InvalidTransition as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    row = ctx.store.update("invoices", invoice_id, updates)
    if row is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice_view(row, today_in())
