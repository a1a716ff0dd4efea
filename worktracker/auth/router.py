from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..logging import structlog
from ..models.models import Profile, User, UserRole
from ..schemas.auth import (
    AccessTokenResponse,
    LoginRequest,
    RefreshRequest,
    SignupRequest,
    TokenResponse,
)
from .security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from .session import (
    Role,
    SessionContext,
    get_session_context,
    live_auth_session,
    load_role,
    open_auth_session,
)
from ..store.table_store import TableStore


router = APIRouter(prefix="/auth", tags=["auth"])


def _issue_tokens(db: Session, user: User) -> TokenResponse:
    auth_session = open_auth_session(db, user)
    role = load_role(TableStore(db), str(user.id))
    return TokenResponse(
        access_token=create_access_token(str(user.id), str(auth_session.id), roles=[role.value]),
        refresh_token=create_refresh_token(str(user.id), str(auth_session.id)),
        role=role.value,
    )


@router.post("/signup", response_model=TokenResponse, status_code=201)
def signup(req: SignupRequest, db: Session = Depends(get_db)):
    email = req.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="User already registered")
    role = Role.ADMIN if email in settings.admin_email_set else Role.USER
    user = User(email=email, password_hash=get_password_hash(req.password))
    user.profile = Profile(email=email, full_name=req.full_name.strip(), department=req.department)
    user.roles = [UserRole(role=role.value)]
    db.add(user)
    db.commit()
    db.refresh(user)
    structlog.get_logger().info("user_signed_up", user_id=str(user.id), role=role.value)
    return _issue_tokens(db, user)


@router.post("/login", response_model=TokenResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == req.email.lower()).first()
    if not user or not user.is_active or not verify_password(req.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid login credentials")
    structlog.get_logger().info("user_signed_in", user_id=str(user.id))
    return _issue_tokens(db, user)


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh(req: RefreshRequest, db: Session = Depends(get_db)):
    payload = decode_token(req.refresh_token, expected_type="refresh")
    auth_session = live_auth_session(db, payload.get("sid"), payload.get("sub"))
    role = load_role(TableStore(db), str(auth_session.user_id))
    return AccessTokenResponse(
        access_token=create_access_token(str(auth_session.user_id), str(auth_session.id), roles=[role.value]),
    )


@router.post("/logout", status_code=204)
def logout(ctx: SessionContext = Depends(get_session_context)):
    ctx.sign_out()


@router.get("/me")
def me(ctx: SessionContext = Depends(get_session_context)):
    return ctx.as_dict()
