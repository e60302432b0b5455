"""
StorageService - uploads finished outputs to Supabase Storage.

Object keys follow {brand}/{format}/{YYYY-MM-DD}/{job_id}/output.{ext}
(UTC date), so a re-run of the same job overwrites its own output.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from supabase import Client

from ..core.config import Config
from ..core.database import get_supabase_client

logger = logging.getLogger(__name__)

OUTPUT_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
}


def extension_for(content_type: Optional[str], default: str) -> str:
    """File extension for a fetched MIME type; unknown types keep the default."""
    return OUTPUT_EXTENSIONS.get((content_type or "").lower(), default)



def build_storage_path(
    brand: str,
    content_format: str,
    job_id: str,
    extension: str,
    when: Optional[datetime] = None,
) -> str:
    """Object key for a job's output."""
    when = when or datetime.now(timezone.utc)
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return f"{brand}/{content_format}/{when.strftime('%Y-%m-%d')}/{job_id}/output.{extension.lstrip('.')}"


class StorageService:
    """Service for content output storage."""

    def __init__(self, supabase: Optional[Client] = None, bucket: Optional[str] = None):
        """
        Initialize StorageService.

        Args:
            supabase: Optional Supabase client. If not provided, creates one.
            bucket: Storage bucket (defaults to Config.STORAGE_BUCKET)
        """
        self.supabase = supabase or get_supabase_client()
        self.bucket = bucket or Config.STORAGE_BUCKET
        logger.info(f"StorageService initialized (bucket: {self.bucket})")

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """
        Upload bytes and return the public URL.

        Args:
            path: Object key inside the bucket
            data: File contents
            content_type: MIME type stored with the object

        Returns:
            Public URL of the uploaded object
        """
        await asyncio.to_thread(
            lambda: self.supabase.storage.from_(self.bucket).upload(
                path,
                data,
                {"content-type": content_type, "upsert": "true"}
            )
        )
        logger.info(f"Uploaded {len(data)} bytes to {self.bucket}/{path}")
        return self.get_public_url(path)

    def get_public_url(self, path: str) -> str:
        url = self.supabase.storage.from_(self.bucket).get_public_url(path)
        # Older storage clients return a trailing "?" on public URLs
        return url.rstrip("?") if isinstance(url, str) else url
