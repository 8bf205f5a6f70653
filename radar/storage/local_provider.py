"""
Local filesystem storage provider for development.
Saves files to a local directory instead of Azure Blob Storage.
"""
from pathlib import Path
from typing import BinaryIO, Union
from urllib.parse import quote

import structlog

from .provider import StorageProvider


logger = structlog.get_logger(__name__)


class LocalStorageProvider(StorageProvider):
    """Files live under ``<base_dir>/uploads`` and are served from ``/files/local``."""

    def __init__(self, base_dir: str = "var/storage", public_base_url: str = "http://localhost:8000"):
        self.base_dir = Path(base_dir)
        self.upload_dir = self.base_dir / "uploads"
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def _get_path(self, key: str) -> Path:
        # Remove leading slash and sanitize
        clean_key = key.lstrip("/").replace("..", "").replace("\\", "/")
        return self.upload_dir / clean_key

    def put(self, key: str, data: Union[bytes, BinaryIO], content_type: str) -> None:
        path = self._get_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            if hasattr(data, "read"):
                f.write(data.read())
            else:
                f.write(data)
        logger.info("local_file_stored", key=key, content_type=content_type)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/files/local/{quote(key.lstrip('/'))}"
