from fastapi import APIRouter, Depends

from ..auth.session import SessionContext, get_session_context
from ..services.due_dates import today_in
from ..services.views import dashboard_view, navigation


router = APIRouter(tags=["dashboard"])


@router.get("/dashboard")
def dashboard(ctx: SessionContext = Depends(get_session_context)):
    return dashboard_view(ctx, today_in())


@router.get("/navigation")
def nav(ctx: SessionContext = Depends(get_session_context)):
    return navigation(ctx.role)
