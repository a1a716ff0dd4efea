"""
Local filesystem storage provider for development.
Saves files under a local directory; they are served back by /files/local.
"""
from pathlib import Path
from typing import BinaryIO, Optional, Union
from urllib.parse import quote

from ..config import settings
from ..logging import structlog
from .provider import StorageError, StorageProvider


class LocalStorageProvider(StorageProvider):
    name = "local"

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.local_storage_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def get_path(self, key: str) -> Path:
        # strip leading slash and parent references
        clean_key = key.lstrip("/").replace("..", "").replace("\\", "/")
        return self.base_dir / clean_key

    def contains(self, path: Path) -> bool:
        return str(path.resolve()).startswith(str(self.base_dir.resolve()))

    def upload(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:
        path = self.get_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data.read() if hasattr(data, "read") else data)
        except OSError as exc:
            raise StorageError(str(exc)) from exc
        structlog.get_logger().debug("local_file_written", key=key, content_type=content_type)

    def public_url(self, key: str) -> Optional[str]:
        if not self.get_path(key).exists():
            return None
        return f"{settings.public_base_url}/files/local/{quote(key.lstrip('/'))}"

    def delete(self, key: str) -> None:
        path = self.get_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(str(exc)) from exc
