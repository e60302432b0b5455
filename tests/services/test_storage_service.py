"""
Tests for output storage paths and uploads.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from contentengine.services.storage_service import StorageService, build_storage_path, extension_for


class TestBuildStoragePath:
    def test_layout(self):
        when = datetime(2026, 3, 9, 15, 30, tzinfo=timezone.utc)
        path = build_storage_path("nablinds", "reel_kit", "job-1", "mp4", when)
        assert path == "nablinds/reel_kit/2026-03-09/job-1/output.mp4"

    def test_date_is_utc(self):
        # 23:30 at UTC-5 is already the next day in UTC
        when = datetime(2026, 3, 9, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        path = build_storage_path("acme", "image_kit", "job-2", ".png", when)
        assert path == "acme/image_kit/2026-03-10/job-2/output.png"

    def test_same_job_same_day_same_key(self):
        when = datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert build_storage_path("a", "reel", "j", "mp4", when) == build_storage_path("a", "reel", "j", "mp4", when)

    def test_extension_for_known_and_unknown_types(self):
        assert extension_for("image/webp", "png") == "webp"
        assert extension_for("IMAGE/JPEG", "png") == "jpg"
        assert extension_for("application/octet-stream", "mp4") == "mp4"
        assert extension_for(None, "png") == "png"


class TestStorageService:
    @pytest.mark.asyncio
    async def test_upload_returns_public_url(self):
        supabase = MagicMock()
        bucket = supabase.storage.from_.return_value
        bucket.get_public_url.return_value = "https://cdn.test/content-outputs/a/output.png?"

        service = StorageService(supabase=supabase, bucket="content-outputs")
        url = await service.upload("a/output.png", b"png", "image/png")

        supabase.storage.from_.assert_called_with("content-outputs")
        bucket.upload.assert_called_once_with(
            "a/output.png", b"png", {"content-type": "image/png", "upsert": "true"}
        )
        assert url == "https://cdn.test/content-outputs/a/output.png"
