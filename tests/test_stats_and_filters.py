"""
Tests for dashboard aggregation and list filtering.
"""

from datetime import date, timedelta

from worktracker.services.filters import FilterCriteria, filter_invoices, filter_rows, narrows, row_department
from worktracker.services.stats import aggregate, issue_counts


TODAY = date(2024, 5, 15)


def _invoice(due_in, status="pending", **extra):
    return {"due_date": (TODAY + timedelta(days=due_in)).isoformat(), "status": status, **extra}


ISSUES = [
    {"id": "1", "status": "not_started", "category": "hardware", "department": None, "reporter": {"department": "Transport"}},
    {"id": "2", "status": "in_progress", "category": "network", "department": "Clinic", "reporter": {"department": "Transport"}},
    {"id": "3", "status": "resolved", "category": "hardware", "department": None, "reporter": {"department": "Clinic"}},
    {"id": "4", "status": "resolved", "category": "software", "department": None, "reporter": None},
]


class TestAggregate:
    """Summary counts over invoices and issues."""

    def test_single_invoice_due_in_three_days(self):
        stats = aggregate([_invoice(3)], [], TODAY)
        assert stats.total_invoices == 1
        assert stats.pending_invoices == 1
        assert stats.due_soon_invoices == 1
        assert stats.overdue_invoices == 0

    def test_paid_invoices_are_never_overdue(self):
        stats = aggregate([_invoice(-10, "paid"), _invoice(-1)], [], TODAY)
        assert stats.overdue_invoices == 1
        assert stats.pending_invoices == 1
        assert stats.total_invoices == 2

    def test_issue_partition(self):
        stats = aggregate([], ISSUES, TODAY)
        assert stats.open_issues + stats.resolved_issues == len(ISSUES)
        assert stats.resolved_issues == 2

    def test_empty_sets(self):
        assert aggregate([], [], TODAY).as_dict() == {
            "total_invoices": 0,
            "pending_invoices": 0,
            "overdue_invoices": 0,
            "due_soon_invoices": 0,
            "open_issues": 0,
            "resolved_issues": 0,
        }

    def test_issue_counts(self):
        assert issue_counts(ISSUES).as_dict() == {"total": 4, "open": 2, "resolved": 2}


class TestFilterRows:
    """Status, department and category filters."""

    def test_all_is_identity(self):
        assert filter_rows(ISSUES, FilterCriteria(status="all", department="all", category="all")) == ISSUES

    def test_missing_criteria_is_identity(self):
        assert filter_rows(ISSUES, FilterCriteria()) == ISSUES

    def test_idempotent(self):
        criteria = FilterCriteria(category="hardware")
        once = filter_rows(ISSUES, criteria)
        assert filter_rows(once, criteria) == once

    def test_order_preserved(self):
        result = filter_rows(ISSUES, FilterCriteria(status="resolved"))
        assert [r["id"] for r in result] == ["3", "4"]

    def test_department_falls_back_to_reporter(self):
        result = filter_rows(ISSUES, FilterCriteria(department="Transport"))
        assert [r["id"] for r in result] == ["1"]

    def test_row_department_wins(self):
        assert row_department(ISSUES[1]) == "Clinic"
        result = filter_rows(ISSUES, FilterCriteria(department="Clinic"))
        assert [r["id"] for r in result] == ["2", "3"]

    def test_narrows(self):
        assert narrows(FilterCriteria()) is False
        assert narrows(FilterCriteria(status="all", department="", category="all")) is False
        assert narrows(FilterCriteria(category="network")) is True

    def test_criteria_combine(self):
        result = filter_rows(ISSUES, FilterCriteria(status="resolved", category="hardware"))
        assert [r["id"] for r in result] == ["3"]


class TestFilterInvoices:
    """Invoice list filter including the derived overdue status."""

    def test_overdue_is_derived(self):
        rows = [_invoice(-2, id="a"), _invoice(-2, "paid", id="b"), _invoice(4, id="c")]
        assert [r["id"] for r in filter_invoices(rows, "overdue", TODAY)] == ["a"]

    def test_stored_status(self):
        rows = [_invoice(-2, id="a"), _invoice(-2, "paid", id="b")]
        assert [r["id"] for r in filter_invoices(rows, "paid", TODAY)] == ["b"]
        assert filter_invoices(rows, "all", TODAY) == rows
