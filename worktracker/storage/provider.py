from typing import BinaryIO, Optional, Union


class StorageError(Exception):
    """Upload or delete failed in the backing store; message is the backend's."""


class StorageProvider:
    """Object storage for uploaded ledger documents."""

    name = "base"

    def upload(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:
        raise NotImplementedError

    def public_url(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError
