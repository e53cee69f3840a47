"""
Blob Store backed by Supabase Storage.

The supabase client is synchronous, so calls run in a worker thread to keep
the event loop free while large files upload.
"""

import asyncio
import logging
from typing import Optional

from exceptions import InternalError

logger = logging.getLogger(__name__)


class BlobStore:
    """
    Upload objects to one storage bucket and issue signed download URLs.

    Args:
        client: Supabase client created with the service role key, or None
            when storage is not configured (every call then fails).
        bucket: Bucket name
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _bucket(self):
        if self.client is None:
            raise InternalError("Blob storage is not configured.")
        return self.client.storage.from_(self.bucket)

    @staticmethod
    def _file_options(content_type: str, metadata: Optional[dict]) -> dict:
        options = {"content-type": content_type, "upsert": "false"}
        if metadata:
            options["metadata"] = {k: str(v) for k, v in metadata.items()}
        return options

    async def upload_file(
        self,
        path: str,
        local_path: str,
        content_type: str,
        metadata: Optional[dict] = None,
    ) -> str:
        """Upload a local file to `path`. Returns the object path."""
        bucket = self._bucket()

        def _upload():
            with open(local_path, "rb") as f:
                return bucket.upload(
                    path=path,
                    file=f.read(),
                    file_options=self._file_options(content_type, metadata),
                )

        await asyncio.to_thread(_upload)
        logger.info(f"Uploaded {path} to bucket {self.bucket}")
        return path

    async def upload_bytes(
        self,
        path: str,
        data: bytes,
        content_type: str,
        metadata: Optional[dict] = None,
    ) -> str:
        """Upload an in-memory payload to `path`. Returns the object path."""
        bucket = self._bucket()
        await asyncio.to_thread(
            bucket.upload,
            path=path,
            file=data,
            file_options=self._file_options(content_type, metadata),
        )
        logger.info(f"Uploaded {path} ({len(data)} bytes) to bucket {self.bucket}")
        return path

    async def create_signed_url(self, path: str, expires_in: int) -> str:
        """Issue a signed download URL valid for `expires_in` seconds."""
        bucket = self._bucket()
        response = await asyncio.to_thread(bucket.create_signed_url, path, expires_in)

        # storage3 has returned both spellings across releases
        url = None
        if isinstance(response, dict):
            url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise InternalError(f"Storage did not return a signed URL for {path}.")
        return url
