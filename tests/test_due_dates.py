"""
Tests for the due-date classifier.

Tests validate:
- Bucket boundaries around the due-soon window
- Paid status overriding the date
- Labels and date coercion
"""

from datetime import date, datetime, timedelta

import pytest

from worktracker.services.due_dates import (
    Bucket,
    as_date,
    classify,
    classify_invoice,
    days_between,
    today_in,
)


TODAY = date(2024, 3, 10)


def _in(days):
    return TODAY + timedelta(days=days)


class TestClassify:
    """Bucket selection by whole calendar days."""

    def test_due_today_is_due_soon(self):
        result = classify(TODAY, TODAY)
        assert result.bucket is Bucket.DUE_SOON
        assert result.days_delta == 0

    def test_last_day_of_window_is_due_soon(self):
        assert classify(_in(5), TODAY).bucket is Bucket.DUE_SOON

    def test_day_after_window_is_on_track(self):
        result = classify(_in(6), TODAY)
        assert result.bucket is Bucket.ON_TRACK
        assert result.days_delta == 6

    def test_yesterday_is_overdue(self):
        result = classify(_in(-1), TODAY)
        assert result.bucket is Bucket.OVERDUE
        assert result.days_delta == -1
        assert result.magnitude == 1

    def test_paid_wins_over_date(self):
        result = classify(_in(-30), TODAY, status="paid")
        assert result.bucket is Bucket.PAID
        assert result.days_delta == -30

    def test_custom_window(self):
        assert classify(_in(2), TODAY, due_soon_days=1).bucket is Bucket.ON_TRACK

    def test_accepts_iso_strings(self):
        assert classify("2024-03-09", "2024-03-10T08:15:00").bucket is Bucket.OVERDUE


class TestLabels:
    """Human labels shown next to each invoice."""

    def test_overdue_label(self):
        assert classify(_in(-3), TODAY).label() == "3d overdue"

    def test_days_left_label(self):
        assert classify(_in(12), TODAY).label() == "12d left"

    def test_paid_label(self):
        assert classify(_in(4), TODAY, status="paid").label() == "Paid"

    def test_as_dict(self):
        assert classify(_in(2), TODAY).as_dict() == {"bucket": "due_soon", "days_delta": 2, "label": "2d left"}


class TestDates:
    """Date coercion helpers."""

    def test_as_date_from_datetime(self):
        assert as_date(datetime(2024, 1, 2, 23, 59)) == date(2024, 1, 2)

    def test_as_date_rejects_blank(self):
        with pytest.raises(ValueError):
            as_date("  ")

    def test_days_between_crosses_month(self):
        assert days_between("2024-03-01", "2024-02-28") == 2

    def test_classify_invoice_row(self):
        row = {"due_date": "2024-03-12", "status": "pending"}
        assert classify_invoice(row, TODAY).bucket is Bucket.DUE_SOON

    def test_today_in_named_zone(self):
        assert isinstance(today_in("Africa/Accra"), date)
