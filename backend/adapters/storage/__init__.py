"""Storage adapters for uploaded photos."""

from .photo_storage import (
    ALLOWED_EXTENSIONS,
    LocalStorageAdapter,
    StorageAdapter,
    get_storage_adapter,
)

__all__ = [
    "ALLOWED_EXTENSIONS",
    "StorageAdapter",
    "LocalStorageAdapter",
    "get_storage_adapter",
]
