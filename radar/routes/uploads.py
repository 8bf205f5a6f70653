import os
import time

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from slugify import slugify

from ..auth.security import get_current_user
from ..models.models import User
from ..storage.blob_provider import BlobStorageProvider
from ..storage.local_provider import LocalStorageProvider
from ..storage.provider import StorageProvider


router = APIRouter(prefix="/api/uploads", tags=["uploads"])
logger = structlog.get_logger(__name__)

ALLOWED_EXACT_TYPES = {"application/pdf"}


def get_storage(request: Request) -> StorageProvider:
    """
    Get storage provider based on configuration.
    Uses BlobStorageProvider when STORAGE_PROVIDER=blob, local filesystem otherwise.
    """
    settings = request.app.state.settings
    if settings.storage_provider == "blob":
        return BlobStorageProvider(settings.azure_blob_connection, settings.azure_blob_container)
    return LocalStorageProvider(settings.storage_local_dir, settings.public_base_url)


def is_allowed_type(content_type: str) -> bool:
    content_type = (content_type or "").split(";")[0].strip().lower()
    return content_type.startswith("image/") or content_type in ALLOWED_EXACT_TYPES


def storage_key(user_id: str, original_name: str) -> str:
    """``<user_id>/<epoch_ms>-<slug><ext>`` so uploads never overwrite each other."""
    base, ext = os.path.splitext(original_name or "")
    safe_name = slugify(base) or "arquivo"
    safe_ext = slugify(ext.lstrip("."))
    suffix = f".{safe_ext}" if safe_ext else ""
    return f"{user_id}/{int(time.time() * 1000)}-{safe_name}{suffix}"


@router.post("")
async def upload(
    request: Request,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    storage: StorageProvider = Depends(get_storage),
):
    content_type = file.content_type or ""
    if not is_allowed_type(content_type):
        raise HTTPException(status_code=415, detail="Tipo de arquivo não suportado. Envie imagens ou PDF.")

    max_bytes = request.app.state.settings.upload_max_bytes
    # One byte past the cap is enough to know the file is too large
    data = await file.read(max_bytes + 1)
    if not data:
        raise HTTPException(status_code=400, detail="Arquivo inválido.")
    if len(data) > max_bytes:
        raise HTTPException(status_code=413, detail="Arquivo excede o tamanho máximo permitido.")

    key = storage_key(str(user.id), file.filename or "")
    storage.put(key, data, content_type)
    logger.info("file_uploaded", key=key, size_bytes=len(data), user_id=str(user.id))
    return {"url": storage.public_url(key)}
