"""
Seed the local database with an admin, a regular user and sample rows for
every screen (invoices, issue reports, calendar events, ledger notes).

Usage:
  python scripts/seed_demo_data.py

This script is idempotent: users are upserted by email and sample rows are
only added when their table is empty.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

from worktracker.db import SessionLocal, Base, engine
from worktracker.models.models import (
    CalendarEvent,
    Invoice,
    IssueReport,
    LedgerNote,
    Profile,
    User,
    UserRole,
)
from worktracker.auth.security import get_password_hash


def ensure_user(session, email: str, password: str, full_name: str, department: str, role: str) -> User:
    user = session.query(User).filter(User.email == email).first()
    if user:
        if user.profile is None:
            user.profile = Profile(email=email, full_name=full_name, department=department)
        if not user.roles:
            user.roles = [UserRole(role=role)]
        session.add(user)
        session.flush()
        return user
    user = User(email=email, password_hash=get_password_hash(password), is_active=True)
    user.profile = Profile(email=email, full_name=full_name, department=department)
    user.roles = [UserRole(role=role)]
    session.add(user)
    session.flush()
    return user


def seed_invoices(session, admin: User, today: date) -> None:
    if session.query(Invoice).count():
        return
    samples = [
        ("Vodafone Business", "VB-1042", "1250.00", -4, "pending"),
        ("MTN Enterprise", "MTN-77810", "880.50", 2, "pending"),
        ("Dell Ghana", "DG-2024-019", "15400.00", 21, "pending"),
        ("Microsoft 365", "MS-55021", "3200.00", -12, "paid"),
    ]
    for vendor, number, amount, due_in, status in samples:
        session.add(Invoice(
            vendor_name=vendor,
            invoice_number=number,
            amount=Decimal(amount),
            issue_date=today - timedelta(days=30),
            due_date=today + timedelta(days=due_in),
            status=status,
            created_by=admin.id,
        ))


def seed_issues(session, user: User, admin: User) -> None:
    if session.query(IssueReport).count():
        return
    session.add(IssueReport(title="Printer offline", description="Second floor printer shows offline on all PCs.", category="hardware", priority="high", reported_by=user.id))
    session.add(IssueReport(title="VPN drops", description="VPN disconnects every few minutes at the Mampong site.", category="network", priority="critical", status="in_progress", department="Mampong Division", reported_by=admin.id))
    session.add(IssueReport(
        title="Outlook password prompt",
        description="Outlook keeps asking for the password.",
        category="software",
        priority="medium",
        status="resolved",
        resolution_notes="Cleared cached credentials and re-added the profile.",
        resolved_at=datetime.utcnow(),
        reported_by=user.id,
    ))


def seed_calendar_and_ledger(session, admin: User, today: date) -> None:
    if not session.query(CalendarEvent).count():
        session.add(CalendarEvent(title="Server maintenance window", event_type="meeting", event_date=today + timedelta(days=3), created_by=admin.id))
        session.add(CalendarEvent(title="Licence renewals due", event_type="deadline", event_date=today + timedelta(days=10), created_by=admin.id))
    if not session.query(LedgerNote).count():
        session.add(LedgerNote(title="Backup rotation plan", content="Weekly full, daily incremental.", category="plan", created_by=admin.id))
        session.add(LedgerNote(title="Renew SSL certificate", category="reminder", reminder_date=datetime.utcnow() + timedelta(days=7), created_by=admin.id))


def main() -> None:
    # Ensure tables exist (safe for SQLite dev)
    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        today = date.today()
        admin = ensure_user(session, "admin@itdept.org", "TestAdmin123!", "IT Admin", "Processing", "admin")
        user = ensure_user(session, "kofi.mensah@itdept.org", "TestUser123!", "Kofi Mensah", "Transport", "user")
        seed_invoices(session, admin, today)
        seed_issues(session, user, admin)
        seed_calendar_and_ledger(session, admin, today)
        session.commit()
        print("Seeded demo data.")
        print("Admin:   admin@itdept.org / TestAdmin123!")
        print("User:    kofi.mensah@itdept.org / TestUser123!")
    finally:
        session.close()


if __name__ == "__main__":
    main()
