"""Main storage client - switches between dummy and real AWS S3."""

from typing import Optional

from coursemarket.core.config import settings
from coursemarket.core.logging import get_logger

logger = get_logger(__name__)


class StorageClient:
    """
    Unified client for uploaded course media.
    Selects the implementation from the USE_DUMMY_S3 setting.
    """

    def __init__(self):
        if settings.USE_DUMMY_S3:
            from .dummy_storage import DummyS3Client
            self._client = DummyS3Client()
            self._mode = "dummy"
            logger.info("StorageClient initialized in DUMMY mode (local storage)")
        else:
            try:
                import boto3
            except ImportError:
                raise ImportError(
                    "boto3 is required for real S3 mode. "
                    "Install it with: pip install boto3"
                )
            self._client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION
            )
            self._bucket = settings.AWS_S3_BUCKET
            self._mode = "real"
            logger.info("StorageClient initialized in REAL mode", bucket=self._bucket)

    @staticmethod
    def build_key(owner: str, filename: str) -> str:
        """Key layout: ``<owner>/<filename>`` with forward slashes."""
        return f"{owner.strip('/')}/{filename}"

    def put_object(self, key: str, body: bytes, content_type: Optional[str] = None) -> dict:
        """
        Store object from bytes.

        Args:
            key: S3 key (path) where to store
            body: File content as bytes
            content_type: MIME type (optional)

        Returns:
            Upload metadata
        """
        if self._mode == "dummy":
            return self._client.put_object(key, body, content_type)
        params = {"Bucket": self._bucket, "Key": key, "Body": body}
        if content_type:
            params["ContentType"] = content_type
        return self._client.put_object(**params)

    def delete_object(self, key: str) -> dict:
        if self._mode == "dummy":
            return self._client.delete_object(key)
        return self._client.delete_object(Bucket=self._bucket, Key=key)

    def object_url(self, key: str) -> str:
        """Public URL the API returns for a stored object."""
        if self._mode == "dummy":
            return self._client.object_url(key)
        return f"https://{self._bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


# Singleton instance
_storage_client = None


def get_storage_client() -> StorageClient:
    """Get singleton storage client instance."""
    global _storage_client
    if _storage_client is None:
        _storage_client = StorageClient()
    return _storage_client
