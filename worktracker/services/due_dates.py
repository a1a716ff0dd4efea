"""
Due-date classification shared by the dashboard, invoice list, calendar
and exports.

Callers fix "now" once per request (see today_in) and pass it to every
classify() call so a render never straddles midnight.
"""
import enum
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

import pytz

from ..config import settings


DateLike = Union[date, datetime, str]


class Bucket(str, enum.Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"
    ON_TRACK = "on_track"
    PAID = "paid"


@dataclass(frozen=True)
class Classification:
    bucket: Bucket
    days_delta: int

    @property
    def magnitude(self) -> int:
        return abs(self.days_delta)

    def label(self) -> str:
        if self.bucket is Bucket.PAID:
            return "Paid"
        if self.bucket is Bucket.OVERDUE:
            return f"{self.magnitude}d overdue"
        return f"{self.days_delta}d left"

    def as_dict(self) -> dict:
        return {"bucket": self.bucket.value, "days_delta": self.days_delta, "label": self.label()}


def as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        # accepts both "2024-02-01" and full ISO timestamps
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Not a date: {value!r}")


def today_in(tz_name: Optional[str] = None) -> date:
    tz = pytz.timezone(tz_name or settings.tz_default)
    return datetime.now(tz).date()


def days_between(due: DateLike, now: DateLike) -> int:
    """Whole calendar days from now until due; negative once due has passed."""
    return (as_date(due) - as_date(now)).days


def classify(due: DateLike, now: DateLike, status: Optional[str] = None, due_soon_days: Optional[int] = None) -> Classification:
    threshold = settings.due_soon_days if due_soon_days is None else due_soon_days
    delta = days_between(due, now)
    if status == "paid":
        return Classification(Bucket.PAID, delta)
    if delta < 0:
        return Classification(Bucket.OVERDUE, delta)
    if delta <= threshold:
        return Classification(Bucket.DUE_SOON, delta)
    return Classification(Bucket.ON_TRACK, delta)


def classify_invoice(row: dict, now: DateLike) -> Classification:
    return classify(row["due_date"], now, row.get("status"))
