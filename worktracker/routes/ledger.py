import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from ..auth.session import SessionContext, get_session_context, require_admin
from ..logging import structlog
from ..schemas.ledger import LedgerNoteInput
from ..services.views import ledger_view
from ..storage.provider import StorageError, StorageProvider
from ..store.table_store import StoreWriteError
from .files import document_key, get_storage


router = APIRouter(prefix="/ledger", tags=["ledger"])


def _get_note(ctx: SessionContext, note_id: str) -> dict:
    try:
        uuid.UUID(str(note_id))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid note id") from exc
    row = ctx.store.get("ledger_notes", note_id)
    if not row:
        raise HTTPException(status_code=404, detail="Note not found")
    return row


def _updated(ctx: SessionContext, note_id: str, values: dict) -> dict:
    row = ctx.store.update("ledger_notes", note_id, values)
    if row is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return row


@router.get("")
def list_notes(
    category: Optional[str] = Query(default="all", pattern="^(all|note|reminder|plan|document)$"),
    ctx: SessionContext = Depends(get_session_context),
):
    return ledger_view(ctx, category)


@router.post("", status_code=201)
def create_note(payload: LedgerNoteInput, ctx: SessionContext = Depends(require_admin)):
    return ctx.store.insert("ledger_notes", {**payload.model_dump(), "created_by": ctx.user_id})


@router.put("/{note_id}")
def update_note(note_id: str, payload: LedgerNoteInput, ctx: SessionContext = Depends(require_admin)):
    _get_note(ctx, note_id)
    # attachment fields are kept; they change only through /attachment
    return _updated(ctx, note_id, payload.model_dump())


@router.post("/{note_id}/toggle")
def toggle_complete(note_id: str, ctx: SessionContext = Depends(require_admin)):
    note = _get_note(ctx, note_id)
    return _updated(ctx, note_id, {"is_completed": not note["is_completed"]})


@router.delete("/{note_id}", status_code=204)
def delete_note(note_id: str, ctx: SessionContext = Depends(require_admin)):
    _get_note(ctx, note_id)
    if not ctx.store.delete("ledger_notes", note_id):
        raise HTTPException(status_code=404, detail="Note not found")


@router.post("/{note_id}/attachment")
async def upload_attachment(
    note_id: str,
    file: UploadFile = File(...),
    ctx: SessionContext = Depends(require_admin),
    storage: StorageProvider = Depends(get_storage),
):
    note = _get_note(ctx, note_id)
    if note["category"] != "document":
        raise HTTPException(status_code=400, detail="Attachments are only kept on document entries")
    original_name = file.filename or "upload"
    key = document_key(ctx.user_id, original_name)
    content = await file.read()
    log = structlog.get_logger()
    try:
        storage.upload(key, content, file.content_type or "application/octet-stream")
    except StorageError as exc:
        log.error("ledger_attachment_failed", note_id=note_id, provider=storage.name, error=str(exc))
        raise HTTPException(status_code=502, detail=f"Upload failed: {exc}") from exc
    log.info("ledger_attachment_uploaded", note_id=note_id, provider=storage.name, key=key, size=len(content))
    try:
        return _updated(ctx, note_id, {"file_url": storage.public_url(key), "file_name": original_name})
    except StoreWriteError:
        # the row never pointed at it
        try:
            storage.delete(key)
        except StorageError as exc:
            log.warning("ledger_attachment_orphaned", note_id=note_id, provider=storage.name, key=key, error=str(exc))
        raise
