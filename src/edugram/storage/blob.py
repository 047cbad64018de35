"""Blob storage for uploaded images and ID cards.

Objects live under ``{media_root}/{bucket}/{name}``. Only the buckets in
``PUBLIC_BUCKETS`` are served back by the app (one ``/media/{bucket}`` static
mount each), so their URLs do not expire. College ID cards are never served.
"""

from __future__ import annotations

import asyncio
import re
import time
from dataclasses import dataclass
from pathlib import Path

import structlog

from edugram.config import get_settings
from edugram.errors import UpstreamFailure, ValidationError

logger = structlog.get_logger()

PROFILE_PICTURES = "profile-pictures"
COLLEGE_IDS = "college-ids"
POST_IMAGES = "post-images"
BUCKETS = (PROFILE_PICTURES, COLLEGE_IDS, POST_IMAGES)
PUBLIC_BUCKETS = (PROFILE_PICTURES, POST_IMAGES)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class StoredBlob:
    path: str  # "{bucket}/{name}"
    url: str


def object_name(owner_id: str, filename: str | None) -> str:
    """``{owner}_{epochMillis}_{filename}`` with the filename reduced to safe characters."""
    safe = _UNSAFE_CHARS.sub("_", Path(filename or "upload").name).strip("._") or "upload"
    return f"{owner_id}_{int(time.time() * 1000)}_{safe}"


class BlobStorage:
    def __init__(self, root: str | Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def ensure_buckets(self) -> None:
        for bucket in BUCKETS:
            (self.root / bucket).mkdir(parents=True, exist_ok=True)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    async def store(self, bucket: str, owner_id: str, filename: str | None, data: bytes) -> StoredBlob:
        """
        Persist an upload and return its storage path and URL.

        Raises:
            ValidationError: If the bucket is unknown or the upload is empty.
            UpstreamFailure: If the file cannot be written.
        """
        if bucket not in BUCKETS:
            raise ValidationError(f"Unknown bucket: {bucket}")
        if not data:
            raise ValidationError("Uploaded file is empty")

        name = object_name(owner_id, filename)
        target = self.root / bucket / name
        try:
            await asyncio.to_thread(_write, target, data)
        except OSError as e:
            logger.error("blob_write_failed", bucket=bucket, name=name, error=str(e))
            raise UpstreamFailure("Failed to upload file") from e

        path = f"{bucket}/{name}"
        logger.info("blob_stored", path=path, size=len(data))
        return StoredBlob(path=path, url=self.url_for(path))


def _write(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


def get_blob_storage() -> BlobStorage:
    """FastAPI dependency: blob storage rooted at the configured media directory."""
    settings = get_settings()
    return BlobStorage(settings.media_root, settings.media_base_url)


@dataclass(frozen=True)
class Upload:
    """An uploaded file read fully into memory."""

    filename: str | None
    data: bytes
