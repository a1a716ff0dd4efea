"""
Month grid for the shared calendar: one bucket per day holding the events
and unpaid invoices that fall on it, plus the number of blank cells before
the first day in a Sunday-first 7-column grid.
"""
import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List


@dataclass
class DayBucket:
    date: date
    events: List[dict] = field(default_factory=list)
    invoices: List[dict] = field(default_factory=list)

    @property
    def iso(self) -> str:
        return self.date.isoformat()

    @property
    def has_items(self) -> bool:
        return bool(self.events or self.invoices)

    def as_dict(self) -> dict:
        return {
            "date": self.iso,
            "events": self.events,
            "invoices": self.invoices,
            "has_items": self.has_items,
        }


@dataclass
class MonthView:
    year: int
    month: int
    days: List[DayBucket]
    leading_blanks: int

    def as_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "leading_blanks": self.leading_blanks,
            "days": [d.as_dict() for d in self.days],
        }


def index_by_date(rows: Iterable[dict], date_field: str) -> Dict[str, List[dict]]:
    index: Dict[str, List[dict]] = defaultdict(list)
    for row in rows:
        value = row.get(date_field)
        if value:
            index[str(value)].append(row)
    return index


def sunday_index(d: date) -> int:
    # date.weekday() is Monday=0
    return (d.weekday() + 1) % 7


def month_days(year: int, month: int) -> List[date]:
    first = date(year, month, 1)
    count = calendar.monthrange(year, month)[1]
    return [first + timedelta(days=i) for i in range(count)]


def build_month(year: int, month: int, events: Iterable[dict], invoices: Iterable[dict]) -> MonthView:
    events_by_day = index_by_date(events, "event_date")
    invoices_by_day = index_by_date(invoices, "due_date")
    days = [
        DayBucket(
            date=d,
            events=list(events_by_day.get(d.isoformat(), [])),
            invoices=list(invoices_by_day.get(d.isoformat(), [])),
        )
        for d in month_days(year, month)
    ]
    return MonthView(year=year, month=month, days=days, leading_blanks=sunday_index(days[0].date))


def day_items(day: date, events: Iterable[dict], invoices: Iterable[dict]) -> DayBucket:
    key = day.isoformat()
    return DayBucket(
        date=day,
        events=[e for e in events if e.get("event_date") == key],
        invoices=[i for i in invoices if i.get("due_date") == key],
    )
