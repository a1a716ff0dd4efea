"""
Tests for issue transitions, invoice payment and the e-ticket text.
"""

from datetime import datetime

import pytest

from worktracker.services.issues import InvalidTransition, mark_paid_updates, render_eticket, transition_updates


class TestTransitions:
    """Forward-only status moves."""

    def test_start(self):
        assert transition_updates("not_started", "in_progress") == {"status": "in_progress"}

    def test_resolve_sets_notes_and_timestamp(self):
        now = datetime(2024, 2, 2, 10, 0)
        updates = transition_updates("in_progress", "resolved", resolution_notes="  Replaced cable  ", now=now)
        assert updates == {"status": "resolved", "resolution_notes": "Replaced cable", "resolved_at": now}

    def test_resolve_straight_from_not_started(self):
        assert transition_updates("not_started", "resolved", resolution_notes="done")["status"] == "resolved"

    def test_resolve_requires_notes(self):
        with pytest.raises(InvalidTransition):
            transition_updates("in_progress", "resolved", resolution_notes="   ")

    @pytest.mark.parametrize("current,target", [
        ("resolved", "in_progress"),
        ("resolved", "not_started"),
        ("in_progress", "not_started"),
        ("in_progress", "in_progress"),
    ])
    def test_backwards_moves_rejected(self, current, target):
        with pytest.raises(InvalidTransition):
            transition_updates(current, target, resolution_notes="x")


class TestMarkPaid:
    def test_pending_becomes_paid(self):
        assert mark_paid_updates("pending") == {"status": "paid"}

    def test_paid_twice_rejected(self):
        with pytest.raises(InvalidTransition):
            mark_paid_updates("paid")


class TestETicket:
    """Plain-text ticket for resolved issues."""

    ISSUE = {
        "ticket_number": "TKT-20240201-ABC123",
        "title": "Printer offline",
        "category": "hardware",
        "priority": "high",
        "status": "resolved",
        "created_at": "2024-02-01T09:30:00",
        "resolved_at": "2024-02-02T10:00:00",
        "description": "Second floor printer shows offline.",
        "resolution_notes": "Reinstalled driver.",
        "reporter": {"full_name": "Kofi Mensah", "email": "kofi.mensah@itdept.org"},
    }

    def test_fields_present(self):
        text = render_eticket(self.ISSUE)
        assert "Ticket Number: TKT-20240201-ABC123" in text
        assert "Status: Resolved" in text
        assert "Reported By: Kofi Mensah" in text
        assert "Reported: Feb 01, 2024 09:30" in text
        assert "Resolved: Feb 02, 2024 10:00" in text
        assert "Resolution:\nReinstalled driver." in text

    def test_without_reporter(self):
        issue = dict(self.ISSUE, reporter=None, resolution_notes=None)
        text = render_eticket(issue)
        assert "Reported By" not in text
        assert "Resolution:" not in text
