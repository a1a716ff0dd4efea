"""
Table store: the row-level contract the rest of the app talks to.

Rows cross this boundary as plain dicts with JSON-friendly values
(string UUIDs, ISO dates and timestamps, floats for amounts). Filters
and written values may be given in the same shape; they are coerced to
the column types before they reach SQLAlchemy.

A failed read raises StoreReadError. An empty list always means the
query succeeded and matched nothing.
"""
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy import Date, DateTime, Numeric
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.types import Uuid

from ..logging import structlog
from ..models.models import (
    CalendarEvent,
    Invoice,
    IssueReport,
    LedgerNote,
    Profile,
    UserRole,
)


TABLES = {
    "invoices": Invoice,
    "issue_reports": IssueReport,
    "calendar_events": CalendarEvent,
    "ledger_notes": LedgerNote,
    "profiles": Profile,
    "user_roles": UserRole,
}

Row = Dict[str, Any]

log = structlog.get_logger("worktracker.store")


class StoreError(Exception):
    """Base class for table store failures; message is the backend's."""

    kind = "store"

    def __init__(self, table: str, message: str):
        super().__init__(message)
        self.table = table
        self.message = message


class StoreReadError(StoreError):
    kind = "read"


class StoreWriteError(StoreError):
    kind = "write"


def _plain(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def row_to_dict(obj: Any) -> Row:
    return {c.key: _plain(getattr(obj, c.key)) for c in obj.__table__.columns}


def _coerce(column, value: Any) -> Any:
    if value is None:
        return None
    ctype = column.type
    if isinstance(ctype, Uuid) and not isinstance(value, uuid.UUID):
        return uuid.UUID(str(value))
    if isinstance(ctype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        return datetime.fromisoformat(str(value))
    if isinstance(ctype, Date):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value)[:10])
    if isinstance(ctype, Numeric) and not isinstance(value, Decimal):
        return Decimal(str(value))
    return value


class TableStore:
    """Select/insert/update/delete by table name over one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}")

    def _column(self, model, name: str):
        col = model.__table__.columns.get(name)
        if col is None:
            raise ValueError(f"Unknown column {model.__tablename__}.{name}")
        return col

    def _values(self, model, values: Mapping[str, Any]) -> Dict[str, Any]:
        return {k: _coerce(self._column(model, k), v) for k, v in values.items()}

    def select(
        self,
        table: str,
        *,
        eq: Optional[Mapping[str, Any]] = None,
        neq: Optional[Mapping[str, Any]] = None,
        in_: Optional[Mapping[str, Iterable[Any]]] = None,
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        model = self._model(table)
        query = self.db.query(model)
        for name, value in (eq or {}).items():
            col = self._column(model, name)
            query = query.filter(col == _coerce(col, value))
        for name, value in (neq or {}).items():
            col = self._column(model, name)
            query = query.filter(col != _coerce(col, value))
        for name, values in (in_ or {}).items():
            col = self._column(model, name)
            wanted = [_coerce(col, v) for v in values]
            if not wanted:
                return []
            query = query.filter(col.in_(wanted))
        if order_by:
            col = self._column(model, order_by)
            query = query.order_by(col.desc() if desc else col.asc())
        if limit is not None:
            query = query.limit(limit)
        try:
            return [row_to_dict(obj) for obj in query.all()]
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("store_read_failed", table=table, error=str(exc))
            raise StoreReadError(table, str(getattr(exc, "orig", None) or exc)) from exc

    def get(self, table: str, row_id: Any) -> Optional[Row]:
        rows = self.select(table, eq={"id": row_id})
        return rows[0] if rows else None

    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        model = self._model(table)
        obj = model(**self._values(model, values))
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("store_write_failed", table=table, op="insert", error=str(exc))
            raise StoreWriteError(table, str(getattr(exc, "orig", None) or exc)) from exc
        row = row_to_dict(obj)
        log.info("store_insert", table=table, id=row["id"])
        return row

    def update(self, table: str, row_id: Any, values: Mapping[str, Any]) -> Optional[Row]:
        """Apply values to one row. Returns None when no row has that id."""
        model = self._model(table)
        changes = self._values(model, values)
        try:
            obj = self.db.get(model, _coerce(self._column(model, "id"), row_id))
            if obj is None:
                return None
            for name, value in changes.items():
                setattr(obj, name, value)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("store_write_failed", table=table, op="update", id=str(row_id), error=str(exc))
            raise StoreWriteError(table, str(getattr(exc, "orig", None) or exc)) from exc
        log.info("store_update", table=table, id=str(row_id), fields=sorted(changes))
        return row_to_dict(obj)

    def delete(self, table: str, row_id: Any) -> bool:
        model = self._model(table)
        try:
            obj = self.db.get(model, _coerce(self._column(model, "id"), row_id))
            if obj is None:
                return False
            self.db.delete(obj)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            log.error("store_write_failed", table=table, op="delete", id=str(row_id), error=str(exc))
            raise StoreWriteError(table, str(getattr(exc, "orig", None) or exc)) from exc
        log.info("store_delete", table=table, id=str(row_id))
        return True


def unique(values: Sequence[Any]) -> List[Any]:
    """Distinct values, first-seen order, None dropped."""
    seen = []
    for v in values:
        if v is not None and v not in seen:
            seen.append(v)
    return seen
