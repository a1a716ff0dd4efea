"""
CSV and PDF exports for the invoice and issue lists.

Rows arrive already filtered by the list criteria; an optional inclusive
date range is applied here (due_date for invoices, created_at for issues)
before serialising. Output is deterministic for a fixed row set, range
and "now".
"""
import csv
import enum
import io
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from ..config import settings
from .due_dates import DateLike, as_date, classify_invoice
from .relations import reporter_name


class ExportFormat(str, enum.Enum):
    CSV = "csv"
    PDF = "pdf"


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.PDF: "application/pdf",
}

INVOICE_COLUMNS = ["Vendor", "Invoice #", "Amount", "Status", "Issue Date", "Due Date", "Days Left"]
ISSUE_COLUMNS = ["Ticket", "Title", "Category", "Priority", "Status", "Reported By", "Created", "Resolved"]


def humanize(value: Optional[str]) -> str:
    return (value or "").replace("_", " ").title()


def filter_label(value: Optional[str]) -> str:
    return "All" if not value or value == "all" else humanize(value)


def format_date(value: Optional[DateLike]) -> str:
    if not value:
        return "-"
    return as_date(value).strftime("%b %d, %Y")


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "-"
    return datetime.fromisoformat(str(value)).strftime("%b %d, %Y %H:%M")


def format_currency(amount, symbol: Optional[str] = None) -> str:
    return f"{symbol if symbol is not None else settings.currency_symbol}{Decimal(str(amount)):,.2f}"


def _money(amount) -> Decimal:
    return Decimal(str(amount)).quantize(Decimal("0.01"))


def filter_date_range(rows: Iterable[dict], date_field: str, start: Optional[DateLike] = None, end: Optional[DateLike] = None) -> List[dict]:
    """Inclusive on both ends; a missing bound is open. Input order is kept."""
    lo = as_date(start) if start else None
    hi = as_date(end) if end else None
    kept = []
    for row in rows:
        d = as_date(row[date_field])
        if (lo is None or d >= lo) and (hi is None or d <= hi):
            kept.append(row)
    return kept


def export_filename(entity: str, status: Optional[str], start: Optional[DateLike], end: Optional[DateLike], fmt: ExportFormat) -> str:
    def part(v):
        return as_date(v).isoformat() if v else "all"

    return f"{entity}_{status or 'all'}_{part(start)}_to_{part(end)}.{ExportFormat(fmt).value}"


def _csv_bytes(header: Sequence[str], records: Iterable[Sequence]) -> bytes:
    buf = io.StringIO()
    # only fields holding a comma, quote or newline get quoted (and escaped)
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(records)
    return buf.getvalue().encode("utf-8")


def invoices_csv(rows: Iterable[dict], now: DateLike) -> bytes:
    records = []
    for inv in rows:
        records.append([
            inv["vendor_name"],
            inv["invoice_number"],
            _money(inv["amount"]),
            inv["status"],
            inv["issue_date"],
            inv["due_date"],
            classify_invoice(inv, now).days_delta,
        ])
    return _csv_bytes(INVOICE_COLUMNS, records)


def issues_csv(rows: Iterable[dict]) -> bytes:
    records = [
        [
            i["ticket_number"],
            i["title"],
            i["category"],
            i["priority"],
            i["status"],
            reporter_name(i),
            i["created_at"],
            i.get("resolved_at") or "",
        ]
        for i in rows
    ]
    return _csv_bytes(ISSUE_COLUMNS, records)


def _table_pdf(title: str, subtitle: str, header: List[str], body: List[List[str]], font_size: int = 9, wide: bool = False) -> bytes:
    buf = io.BytesIO()
    pagesize = landscape(A4) if wide else A4
    doc = SimpleDocTemplate(buf, pagesize=pagesize, leftMargin=14 * mm, rightMargin=14 * mm, topMargin=14 * mm, bottomMargin=14 * mm, title=title)
    styles = getSampleStyleSheet()
    story = [
        Paragraph(title, styles["Title"]),
        Paragraph(subtitle, styles["Normal"]),
        Spacer(1, 6 * mm),
    ]
    table = Table([header] + body, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2980b9")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), font_size),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f5f5f5")]),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#cccccc")),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    story.append(table)
    doc.build(story)
    return buf.getvalue()


def invoices_pdf(rows: Iterable[dict], now: DateLike, status: Optional[str] = None) -> bytes:
    body = []
    for inv in rows:
        info = classify_invoice(inv, now)
        body.append([
            inv["vendor_name"],
            inv["invoice_number"],
            format_currency(inv["amount"]),
            humanize(inv["status"]),
            format_date(inv["issue_date"]),
            format_date(inv["due_date"]),
            f"{info.magnitude}d overdue" if info.days_delta < 0 else f"{info.days_delta}d left",
        ])
    return _table_pdf("Invoice Report", f"Filter: {filter_label(status)}", INVOICE_COLUMNS, body)


def issues_pdf(rows: Iterable[dict], status: Optional[str] = None) -> bytes:
    body = [
        [
            i["ticket_number"],
            i["title"],
            humanize(i["category"]),
            humanize(i["priority"]),
            humanize(i["status"]),
            reporter_name(i),
            format_date(i["created_at"]),
            format_date(i.get("resolved_at")),
        ]
        for i in rows
    ]
    return _table_pdf("Issue Report", f"Filter: {filter_label(status)}", ISSUE_COLUMNS, body, font_size=8, wide=True)


def export_invoices(
    rows: Iterable[dict],
    fmt: ExportFormat,
    now: DateLike,
    status: Optional[str] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
) -> Tuple[bytes, str, str]:
    """Returns (content, filename, media type)."""
    fmt = ExportFormat(fmt)
    selected = filter_date_range(rows, "due_date", start, end)
    content = invoices_csv(selected, now) if fmt is ExportFormat.CSV else invoices_pdf(selected, now, status)
    return content, export_filename("invoices", status, start, end, fmt), MEDIA_TYPES[fmt]


def export_issues(
    rows: Iterable[dict],
    fmt: ExportFormat,
    status: Optional[str] = None,
    start: Optional[DateLike] = None,
    end: Optional[DateLike] = None,
) -> Tuple[bytes, str, str]:
    fmt = ExportFormat(fmt)
    selected = filter_date_range(rows, "created_at", start, end)
    content = issues_csv(selected) if fmt is ExportFormat.CSV else issues_pdf(selected, status)
    return content, export_filename("issues", status, start, end, fmt), MEDIA_TYPES[fmt]
