"""
Issue status workflow: not_started -> in_progress -> resolved.

Nothing moves backwards and resolved is terminal. Resolving writes the
notes and the resolved timestamp in the same update as the status.
"""
from datetime import datetime
from typing import Dict, Optional

from .relations import reporter_name
from .export import format_timestamp, humanize


ALLOWED_TRANSITIONS = {
    "not_started": {"in_progress", "resolved"},
    "in_progress": {"resolved"},
    "resolved": set(),
}


class InvalidTransition(ValueError):
    pass


def transition_updates(current: str, target: str, resolution_notes: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, object]:
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Cannot move issue from {humanize(current)} to {humanize(target)}")
    updates: Dict[str, object] = {"status": target}
    if target == "resolved":
        notes = (resolution_notes or "").strip()
        if not notes:
            raise InvalidTransition("Resolution notes are required to resolve an issue")
        updates["resolution_notes"] = notes
        updates["resolved_at"] = now or datetime.utcnow()
    return updates


def mark_paid_updates(current: str) -> Dict[str, object]:
    if current == "paid":
        raise InvalidTransition("Invoice is already paid")
    return {"status": "paid"}


RULE = "═" * 39


def render_eticket(issue: dict, org_name: str = "IT Department - Work Tracker") -> str:
    """Plain-text e-ticket handed to the reporter once the issue is resolved."""
    lines = [
        RULE,
        "        E-TICKET - ISSUE RESOLVED",
        RULE,
        "",
        f"Ticket Number: {issue['ticket_number']}",
        f"Title: {issue['title']}",
        f"Category: {issue['category']}",
        f"Priority: {issue['priority']}",
        f"Status: {humanize(issue['status'])}",
    ]
    if issue.get("reporter"):
        lines.append(f"Reported By: {reporter_name(issue)}")
    lines.append(f"Reported: {format_timestamp(issue['created_at'])}")
    if issue.get("resolved_at"):
        lines.append(f"Resolved: {format_timestamp(issue['resolved_at'])}")
    lines += ["", "Description:", issue.get("description") or ""]
    if issue.get("resolution_notes"):
        lines += ["", "Resolution:", issue["resolution_notes"]]
    lines += ["", RULE, f"    {org_name}", RULE, ""]
    return "\n".join(lines)
