"""Dummy S3 implementation using the local filesystem."""

from pathlib import Path
from typing import Optional

from coursemarket.core.config import settings
from coursemarket.core.logging import get_logger

logger = get_logger(__name__)


class DummyS3Client:
    """
    Stores objects under S3_STORAGE_PATH and serves them from MEDIA_BASE_URL.
    Mimics the subset of the boto3 S3 API the storage client needs.
    """

    def __init__(self, storage_path: Optional[str] = None):
        self.storage_path = Path(storage_path or settings.S3_STORAGE_PATH)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        logger.info("Initialized DummyS3Client", storage_path=str(self.storage_path))

    def _get_full_path(self, key: str) -> Path:
        """Convert S3 key to local filesystem path."""
        key = key.lstrip('/')
        return self.storage_path / key

    def put_object(self, key: str, body: bytes, content_type: Optional[str] = None) -> dict:
        destination = self._get_full_path(key)
        destination.parent.mkdir(parents=True, exist_ok=True)

        with open(destination, 'wb') as f:
            f.write(body)

        logger.info("Object stored", destination=str(destination), size=len(body))

        return {
            "ETag": f'"{len(body)}"',
            "Location": str(destination),
            "Key": key
        }

    def delete_object(self, key: str) -> dict:
        file_path = self._get_full_path(key)

        if file_path.exists():
            file_path.unlink()
            logger.info("File deleted", path=str(file_path))
        else:
            logger.warning("File not found for deletion", path=str(file_path))

        return {"DeleteMarker": False, "Key": key}

    def object_url(self, key: str) -> str:
        return f"{settings.MEDIA_BASE_URL.rstrip('/')}/{key.lstrip('/')}"
