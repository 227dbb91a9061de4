"""Media storage - supports both dummy (local) and real AWS S3."""

from .client import get_storage_client, StorageClient

__all__ = ["get_storage_client", "StorageClient"]
