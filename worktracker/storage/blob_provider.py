from typing import BinaryIO, Optional, Union

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

from ..config import settings
from .provider import StorageError, StorageProvider


class BlobStorageProvider(StorageProvider):
    """Azure Blob container; the container is expected to allow public reads."""

    name = "blob"

    def __init__(self) -> None:
        if not settings.azure_blob_connection or not settings.azure_blob_container:
            raise RuntimeError("AZURE_BLOB_CONNECTION and AZURE_BLOB_CONTAINER must be set")
        self._service = BlobServiceClient.from_connection_string(settings.azure_blob_connection)
        self._container = settings.azure_blob_container

    def _client(self, key: str):
        return self._service.get_blob_client(self._container, key.lstrip("/"))

    def upload(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:
        try:
            self._client(key).upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as exc:
            raise StorageError(str(exc)) from exc

    def public_url(self, key: str) -> Optional[str]:
        return self._client(key).url

    def delete(self, key: str) -> None:
        try:
            self._client(key).delete_blob()
        except ResourceNotFoundError:
            pass
        except AzureError as exc:
            raise StorageError(str(exc)) from exc
