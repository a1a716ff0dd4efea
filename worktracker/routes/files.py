import os
from datetime import datetime
from mimetypes import guess_type

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from slugify import slugify

from ..config import settings
from ..storage.blob_provider import BlobStorageProvider
from ..storage.local_provider import LocalStorageProvider
from ..storage.provider import StorageProvider


router = APIRouter(prefix="/files", tags=["files"])


def get_storage() -> StorageProvider:
    """
    Storage provider from configuration: Azure Blob when STORAGE_PROVIDER=blob,
    otherwise the local filesystem.
    """
    if settings.storage_provider == "blob":
        return BlobStorageProvider()
    return LocalStorageProvider()


def document_key(user_id: str, original_name: str) -> str:
    stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
    stem, ext = os.path.splitext(original_name or "upload")
    safe_name = slugify(stem) or "upload"
    return f"{settings.documents_prefix}/{user_id}/{stamp}_{safe_name}{ext.lower()}"


@router.get("/local/{file_path:path}")
def serve_local_file(file_path: str):
    """Serve files from local storage."""
    local_storage = LocalStorageProvider()
    path = local_storage.get_path(file_path)
    if not local_storage.contains(path):
        raise HTTPException(status_code=403, detail="Access denied")
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    content_type = guess_type(str(path))[0] or "application/octet-stream"
    return FileResponse(path=str(path), media_type=content_type, filename=path.name)
