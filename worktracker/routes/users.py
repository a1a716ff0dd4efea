import uuid

from fastapi import APIRouter, Depends, HTTPException

from ..auth.session import Role, SessionContext, require_admin
from ..schemas.auth import RoleUpdateRequest
from ..store.table_store import unique


router = APIRouter(prefix="/users", tags=["users"])


def _user_to_dict(profile: dict, roles: list) -> dict:
    # several role rows may exist; the first one is the effective role
    role = Role.parse(roles[0]["role"]) if roles else Role.USER
    return {
        "user_id": profile["user_id"],
        "full_name": profile.get("full_name"),
        "email": profile["email"],
        "department": profile.get("department"),
        "created_at": profile["created_at"],
        "role": role.value,
    }


@router.get("")
def list_users(ctx: SessionContext = Depends(require_admin)):
    profiles = ctx.store.select("profiles", order_by="created_at", desc=True)
    user_ids = unique([p["user_id"] for p in profiles])
    role_rows = ctx.store.select("user_roles", in_={"user_id": user_ids}, order_by="created_at") if user_ids else []
    roles_by_user: dict = {}
    for r in role_rows:
        roles_by_user.setdefault(r["user_id"], []).append(r)
    return [_user_to_dict(p, roles_by_user.get(p["user_id"], [])) for p in profiles]


@router.patch("/{user_id}/role")
def update_role(user_id: str, payload: RoleUpdateRequest, ctx: SessionContext = Depends(require_admin)):
    try:
        uuid.UUID(str(user_id))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid user id") from exc
    profiles = ctx.store.select("profiles", eq={"user_id": user_id}, limit=1)
    if not profiles:
        raise HTTPException(status_code=404, detail="Not found")
    if user_id == ctx.user_id and payload.role != Role.ADMIN.value:
        raise HTTPException(status_code=400, detail="Admins cannot demote themselves")
    rows = ctx.store.select("user_roles", eq={"user_id": user_id}, order_by="created_at")
    if rows:
        ctx.store.update("user_roles", rows[0]["id"], {"role": payload.role})
    else:
        ctx.store.insert("user_roles", {"user_id": user_id, "role": payload.role})
    roles = ctx.store.select("user_roles", eq={"user_id": user_id}, order_by="created_at")
    return _user_to_dict(profiles[0], roles)
