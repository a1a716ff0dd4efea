"""
Tests for CSV and PDF exports.

Tests validate:
- Inclusive date range with input order kept
- CSV quoting of awkward text
- Deterministic file names
- PDF output is a PDF
"""

from datetime import date

import pytest

from worktracker.services.export import (
    ExportFormat,
    export_filename,
    export_invoices,
    export_issues,
    filter_date_range,
    format_currency,
    invoices_csv,
    issues_csv,
)


NOW = date(2024, 2, 10)

INVOICES = [
    {"vendor_name": "Vodafone", "invoice_number": "V-1", "amount": 100.0, "status": "pending", "issue_date": "2024-01-01", "due_date": "2024-01-20"},
    {"vendor_name": "MTN", "invoice_number": "M-7", "amount": 250.5, "status": "pending", "issue_date": "2024-01-15", "due_date": "2024-02-14"},
    {"vendor_name": "Dell", "invoice_number": "D-3", "amount": 9000.0, "status": "paid", "issue_date": "2024-01-30", "due_date": "2024-02-01"},
    {"vendor_name": "Microsoft", "invoice_number": "MS-2", "amount": 40.0, "status": "pending", "issue_date": "2024-02-20", "due_date": "2024-03-05"},
]

ISSUES = [
    {
        "ticket_number": "TKT-20240201-ABC123",
        "title": "Printer, 2nd floor",
        "category": "hardware",
        "priority": "high",
        "status": "resolved",
        "created_at": "2024-02-01T09:30:00",
        "resolved_at": "2024-02-02T10:00:00",
        "reporter": {"full_name": "Kofi Mensah", "email": "kofi.mensah@itdept.org"},
    },
    {
        "ticket_number": "TKT-20240203-DEF456",
        "title": "VPN",
        "category": "network",
        "priority": "critical",
        "status": "not_started",
        "created_at": "2024-02-03T11:00:00",
        "resolved_at": None,
        "reporter": None,
    },
]


class TestDateRange:
    """Inclusive range filtering."""

    def test_february_only(self):
        kept = filter_date_range(INVOICES, "due_date", "2024-02-01", "2024-02-29")
        assert [i["invoice_number"] for i in kept] == ["M-7", "D-3"]

    def test_open_bounds(self):
        assert filter_date_range(INVOICES, "due_date") == INVOICES
        assert len(filter_date_range(INVOICES, "due_date", start="2024-02-14")) == 2

    def test_timestamp_field(self):
        kept = filter_date_range(ISSUES, "created_at", end="2024-02-01")
        assert [i["ticket_number"] for i in kept] == ["TKT-20240201-ABC123"]


class TestCsv:
    """CSV bodies."""

    def test_invoice_csv_rows(self):
        lines = invoices_csv(INVOICES[:2], NOW).decode("utf-8").splitlines()
        assert lines[0] == "Vendor,Invoice #,Amount,Status,Issue Date,Due Date,Days Left"
        assert lines[1] == "Vodafone,V-1,100.00,pending,2024-01-01,2024-01-20,-21"
        assert lines[2] == "MTN,M-7,250.50,pending,2024-01-15,2024-02-14,4"

    def test_commas_and_quotes_escaped(self):
        row = dict(INVOICES[0], vendor_name='Acme "Best", Ltd')
        body = invoices_csv([row], NOW).decode("utf-8")
        assert '"Acme ""Best"", Ltd"' in body

    def test_issue_csv_reporter_fallback(self):
        lines = issues_csv(ISSUES).decode("utf-8").splitlines()
        assert lines[1] == 'TKT-20240201-ABC123,"Printer, 2nd floor",hardware,high,resolved,Kofi Mensah,2024-02-01T09:30:00,2024-02-02T10:00:00'
        assert lines[2] == "TKT-20240203-DEF456,VPN,network,critical,not_started,Unknown,2024-02-03T11:00:00,"


class TestExport:
    """Full export tuples."""

    def test_filename(self):
        assert export_filename("invoices", "pending", "2024-02-01", None, ExportFormat.CSV) == "invoices_pending_2024-02-01_to_all.csv"
        assert export_filename("issues", None, None, None, ExportFormat.PDF) == "issues_all_all_to_all.pdf"

    def test_invoice_csv_export(self):
        content, filename, media_type = export_invoices(INVOICES, ExportFormat.CSV, NOW, status="all", start="2024-02-01", end="2024-02-29")
        assert media_type == "text/csv"
        assert filename == "invoices_all_2024-02-01_to_2024-02-29.csv"
        assert len(content.decode("utf-8").splitlines()) == 3

    def test_deterministic(self):
        first = export_invoices(INVOICES, ExportFormat.CSV, NOW)
        assert export_invoices(INVOICES, ExportFormat.CSV, NOW) == first

    def test_invoice_pdf(self):
        content, filename, media_type = export_invoices(INVOICES, ExportFormat.PDF, NOW, status="pending")
        assert content.startswith(b"%PDF")
        assert media_type == "application/pdf"
        assert filename.endswith(".pdf")

    def test_issue_pdf(self):
        content, _, _ = export_issues(ISSUES, ExportFormat.PDF, status="all")
        assert content.startswith(b"%PDF")

    def test_empty_export_has_header(self):
        content, _, _ = export_issues([], "csv")
        assert content.decode("utf-8").startswith("Ticket,Title,Category")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            export_issues(ISSUES, "xlsx")


def test_format_currency():
    assert format_currency(1234.5, symbol="GH₵") == "GH₵1,234.50"
