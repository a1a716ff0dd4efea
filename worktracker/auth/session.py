"""
Per-request session context.

A SessionContext is built from the bearer token at the start of every
request and handed to the routes and view composers explicitly. It lives
as long as its auth session row: sign_out() revokes the row, after which
neither the access nor the refresh token of that session is accepted.
"""
import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..logging import structlog
from ..models.models import AuthSession, User
from ..store.table_store import TableStore
from .security import decode_token, http_bearer


class Role(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        try:
            return cls(value)
        except ValueError:
            return cls.USER


def load_role(store: TableStore, user_id: str) -> Role:
    # only the first role row is consulted
    rows = store.select("user_roles", eq={"user_id": user_id}, order_by="created_at", limit=1)
    return Role.parse(rows[0]["role"]) if rows else Role.USER


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def open_auth_session(db: Session, user: User) -> AuthSession:
    now = datetime.utcnow()
    row = AuthSession(user_id=user.id, created_at=now, expires_at=now + timedelta(seconds=settings.refresh_ttl_seconds))
    user.last_login_at = now
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def live_auth_session(db: Session, session_id: Optional[str], user_id: Optional[str]) -> AuthSession:
    try:
        sid = uuid.UUID(str(session_id))
        uid = uuid.UUID(str(user_id))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid subject")
    row = db.get(AuthSession, sid)
    if row is None or row.user_id != uid or row.revoked_at is not None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session ended")
    if _aware(row.expires_at) < datetime.now(timezone.utc):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")
    return row


@dataclass
class SessionContext:
    user_id: str
    email: str
    profile: Optional[dict]
    role: Role
    session_id: str
    store: TableStore

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def sign_out(self) -> None:
        row = self.store.db.get(AuthSession, uuid.UUID(self.session_id))
        if row is not None and row.revoked_at is None:
            row.revoked_at = datetime.utcnow()
            self.store.db.commit()
        structlog.get_logger().info("user_signed_out", user_id=self.user_id)

    def as_dict(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "profile": self.profile,
        }


def build_context(db: Session, user: User, session_id: str) -> SessionContext:
    store = TableStore(db)
    uid = str(user.id)
    profiles = store.select("profiles", eq={"user_id": uid}, limit=1)
    return SessionContext(
        user_id=uid,
        email=user.email,
        profile=profiles[0] if profiles else None,
        role=load_role(store, uid),
        session_id=str(session_id),
        store=store,
    )


def get_session_context(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    db: Session = Depends(get_db),
) -> SessionContext:
    if creds is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    payload = decode_token(creds.credentials)
    auth_session = live_auth_session(db, payload.get("sid"), payload.get("sub"))
    user = db.get(User, auth_session.user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not active")
    return build_context(db, user, str(auth_session.id))


def require_admin(ctx: SessionContext = Depends(get_session_context)) -> SessionContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Forbidden")
    return ctx
