"""Object storage for export files and attendance photos."""

from .blob_store import BlobStore

__all__ = ["BlobStore"]
