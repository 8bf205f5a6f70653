from typing import BinaryIO, Optional, Union

from azure.storage.blob import BlobServiceClient, ContentSettings

from .provider import StorageProvider


class BlobStorageProvider(StorageProvider):
    """Azure Blob container with public read access; URLs are returned without SAS."""

    def __init__(self, connection_string: Optional[str], container: Optional[str]) -> None:
        if not connection_string or not container:
            raise RuntimeError("AZURE_BLOB_CONNECTION and AZURE_BLOB_CONTAINER must be set")
        self._service = BlobServiceClient.from_connection_string(connection_string)
        self._container = container

    def _client(self, key: str):
        return self._service.get_blob_client(self._container, key.lstrip("/"))

    def put(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:
        # No overwrite: keys carry a timestamp, a clash is a real conflict
        self._client(key).upload_blob(
            data,
            overwrite=False,
            content_settings=ContentSettings(content_type=content_type),
        )

    def public_url(self, key: str) -> str:
        return self._client(key).url
