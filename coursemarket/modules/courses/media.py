"""Validation and storage of uploaded course attachments and lesson multimedia."""

from __future__ import annotations

import os
import uuid

from fastapi import HTTPException, UploadFile, status

from coursemarket.core.config import settings
from coursemarket.core.content_constants import ALLOWED_UPLOAD_EXTENSIONS
from coursemarket.core.logging import get_logger
from coursemarket.integrations.storage import StorageClient
from coursemarket.modules.courses.models import MediaAsset

logger = get_logger(__name__)


class ValidatedUpload:
    __slots__ = ("filename", "extension", "content_type", "body")

    def __init__(self, filename: str, extension: str, content_type: str | None, body: bytes):
        self.filename = filename
        self.extension = extension
        self.content_type = content_type
        self.body = body


def validate_upload(upload: UploadFile) -> ValidatedUpload:
    filename = upload.filename or ""
    extension = os.path.splitext(filename)[1].lower()
    if extension not in ALLOWED_UPLOAD_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "File type is not supported", "error": filename},
        )

    limit = settings.MAX_UPLOAD_SIZE_BYTES
    body = upload.file.read(limit + 1)
    if len(body) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "File too large", "error": f"{filename} exceeds {limit} bytes"},
        )

    return ValidatedUpload(filename, extension, upload.content_type, body)


def validate_uploads(uploads: list[UploadFile] | None) -> list[ValidatedUpload]:
    """Validate every file before anything is stored."""
    return [validate_upload(u) for u in (uploads or []) if u.filename]


def store_uploads(
    storage: StorageClient,
    files: list[ValidatedUpload],
    prefix: str,
) -> list[MediaAsset]:
    assets = []
    for item in files:
        key = storage.build_key(prefix, f"{uuid.uuid4().hex}{item.extension}")
        storage.put_object(key, item.body, item.content_type)
        assets.append(
            MediaAsset(
                filename=item.filename,
                content_type=item.content_type,
                size_bytes=len(item.body),
                key=key,
                url=storage.object_url(key),
            )
        )
    if assets:
        logger.info("stored media", prefix=prefix, count=len(assets))
    return assets


def discard_objects(storage: StorageClient, keys: list[str]) -> None:
    """Delete stored objects whose database rows are gone."""
    for key in keys:
        try:
            storage.delete_object(key)
        except Exception as e:
            logger.warning("failed to delete stored object", key=key, error=str(e))
