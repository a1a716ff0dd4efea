import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response

from ..auth.session import SessionContext, get_session_context, require_admin
from ..schemas.issues import IssueCreate, ResolveRequest
from ..services.export import ExportFormat, export_issues
from ..services.filters import FilterCriteria, filter_rows, narrows
from ..services.issues import InvalidTransition, render_eticket, transition_updates
from ..services.relations import attach_reporters
from ..services.views import issues_view


router = APIRouter(prefix="/issues", tags=["issues"])

StatusFilter = Query(default="all", pattern="^(all|not_started|in_progress|resolved)$")


def _get_issue(ctx: SessionContext, issue_id: str) -> dict:
    try:
        uuid.UUID(str(issue_id))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid issue id") from exc
    row = ctx.store.get("issue_reports", issue_id)
    if not row:
        raise HTTPException(status_code=404, detail="Issue not found")
    return row


def _move(ctx: SessionContext, issue_id: str, target: str, notes: Optional[str] = None) -> dict:
    issue = _get_issue(ctx, issue_id)
    try:
        updates = transition_updates(issue["status"], target, resolution_notes=notes, now=datetime.utcnow())
    except InvalidTransition as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    row = ctx.store.update("issue_reports", issue_id, updates)
    if row is None:
        raise HTTPException(status_code=404, detail="Issue not found")
    return row


@router.get("")
def list_issues(
    status: str = StatusFilter,
    department: str = "all",
    category: str = "all",
    ctx: SessionContext = Depends(get_session_context),
):
    criteria = FilterCriteria(status=status, department=department, category=category)
    # users always get their own reports, unfiltered
    if not ctx.is_admin and narrows(criteria):
        raise HTTPException(status_code=403, detail="Issue filters are available to admins only")
    return issues_view(ctx, criteria)


@router.get("/export")
def export(
    format: ExportFormat = ExportFormat.CSV,
    status: str = StatusFilter,
    department: str = "all",
    category: str = "all",
    start: Optional[str] = None,
    end: Optional[str] = None,
    ctx: SessionContext = Depends(require_admin),
):
    rows = attach_reporters(ctx.store, ctx.store.select("issue_reports", order_by="created_at", desc=True))
    rows = filter_rows(rows, FilterCriteria(status=status, department=department, category=category))
    try:
        content, filename, media_type = export_issues(rows, format, status=status, start=start, end=end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return Response(content=content, media_type=media_type, headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.post("", status_code=201)
def create_issue(payload: IssueCreate, ctx: SessionContext = Depends(get_session_context)):
    values = payload.model_dump(exclude={"department"})
    if ctx.is_admin and payload.department:
        values["department"] = payload.department
    return ctx.store.insert("issue_reports", {**values, "reported_by": ctx.user_id})


@router.get("/{issue_id}")
def get_issue(issue_id: str, ctx: SessionContext = Depends(get_session_context)):
    issue = _get_issue(ctx, issue_id)
    if not ctx.is_admin and issue["reported_by"] != ctx.user_id:
        raise HTTPException(status_code=403, detail="You do not have access to this issue")
    return attach_reporters(ctx.store, [issue])[0]


@router.post("/{issue_id}/start")
def start_issue(issue_id: str, ctx: SessionContext = Depends(require_admin)):
    return _move(ctx, issue_id, "in_progress")


@router.post("/{issue_id}/resolve")
def resolve_issue(issue_id: str, payload: ResolveRequest, ctx: SessionContext = Depends(require_admin)):
    return _move(ctx, issue_id, "resolved", notes=payload.resolution_notes)


@router.get("/{issue_id}/ticket", response_class=PlainTextResponse)
def download_ticket(issue_id: str, ctx: SessionContext = Depends(get_session_context)):
    issue = _get_issue(ctx, issue_id)
    if not ctx.is_admin and issue["reported_by"] != ctx.user_id:
        raise HTTPException(status_code=403, detail="You do not have access to this issue")
    if issue["status"] != "resolved":
        raise HTTPException(status_code=400, detail="E-ticket is issued once the issue is resolved")
    issue = attach_reporters(ctx.store, [issue])[0]
    return PlainTextResponse(
        render_eticket(issue),
        headers={"Content-Disposition": f'attachment; filename="{issue["ticket_number"]}.txt"'},
    )
