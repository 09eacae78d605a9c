"""Supabase Storage bucket for generated media."""

import asyncio
from dataclasses import dataclass

from supabase import Client

from tutorialize.domain.errors import StorageError
from tutorialize.services.media import BlobStorage


@dataclass
class SupabaseBlobStorage(BlobStorage):
    """Public Supabase Storage bucket implementation."""

    client: Client
    bucket: str

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Upload ``data`` (overwriting) and return its public URL."""
        return await asyncio.to_thread(self._put, key, data, content_type)

    def _put(self, key: str, data: bytes, content_type: str) -> str:
        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(
                path=key,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"},
            )
        except Exception as exc:
            raise StorageError(f"Failed to upload {key}") from exc
        return bucket.get_public_url(key)
