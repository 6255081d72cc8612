from __future__ import annotations

import base64
import binascii
import logging
import re
import secrets
import time
from pathlib import Path

from roster.core import cells
from roster.core.config import Settings
from roster.services.roster_service import RosterError, RosterService

logger = logging.getLogger(__name__)

MAX_PHOTO_SIZE = 5 * 1024 * 1024  # 5 MB

SUPPORTED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=-]+)*;base64,(?P<data>.*)$", re.DOTALL)
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


class PhotoError(RosterError):
    pass


def _safe_stem(name: str) -> str:
    stem = Path(name).stem if name else ""
    return _UNSAFE_CHARS.sub("-", stem).strip("-")[:40] or "photo"


class PhotoService:
    def __init__(
        self,
        photo_dir: str | Path,
        *,
        url_prefix: str = "/photos",
        max_bytes: int = MAX_PHOTO_SIZE,
    ) -> None:
        self.photo_dir = Path(photo_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes

    @classmethod
    def from_settings(cls, settings: Settings) -> PhotoService:
        return cls(
            settings.PHOTO_DIR,
            url_prefix=settings.PHOTO_URL_PREFIX,
            max_bytes=settings.PHOTO_MAX_BYTES,
        )

    def decode(self, data: str, mime_type: str | None = None) -> tuple[bytes, str]:
        """Decode a base64 payload or data URL into (bytes, content type)."""
        payload = cells.clean_text(data)
        match = _DATA_URL.match(payload)
        if match:
            mime_type = mime_type or match.group("mime")
            payload = match.group("data")

        content_type = cells.clean_text(mime_type).lower()
        if content_type not in SUPPORTED_CONTENT_TYPES:
            raise PhotoError(f"Unsupported image type: {content_type or 'unknown'}. Allowed: JPEG, PNG, GIF, WEBP")

        try:
            content = base64.b64decode("".join(payload.split()), validate=True)
        except (binascii.Error, ValueError) as e:
            raise PhotoError("Photo data is not valid base64") from e

        if not content:
            raise PhotoError("Uploaded photo is empty")
        if len(content) > self.max_bytes:
            raise PhotoError(f"Photo too large: {len(content)} bytes. Maximum: {self.max_bytes} bytes")
        return content, content_type

    def save_photo(self, data: str, mime_type: str | None = None, file_name: str = "") -> str:
        content, content_type = self.decode(data, mime_type)
        ext = SUPPORTED_CONTENT_TYPES[content_type]
        name = f"{_safe_stem(file_name)}_{time.strftime('%Y%m%d%H%M%S')}_{secrets.token_hex(4)}.{ext}"

        try:
            self.photo_dir.mkdir(parents=True, exist_ok=True)
            (self.photo_dir / name).write_bytes(content)
        except OSError as e:
            logger.error("Failed to store photo %s: %s", name, e)
            raise PhotoError(f"Could not store photo: {e}") from e

        logger.info("Stored photo %s (%d bytes)", name, len(content))
        return f"{self.url_prefix}/{name}"

    def cleanup_stale_photos(
        self,
        referenced_urls: set[str],
        max_age_days: float,
        *,
        dry_run: bool = False,
        now: float | None = None,
    ) -> list[str]:
        """Delete photo files older than *max_age_days* that nothing references."""
        if not self.photo_dir.is_dir():
            return []

        cutoff = (now if now is not None else time.time()) - max_age_days * 86400
        referenced = {url.rstrip("/").rsplit("/", 1)[-1] for url in referenced_urls if url}

        removed: list[str] = []
        for path in sorted(self.photo_dir.iterdir()):
            if not path.is_file() or path.name in referenced:
                continue
            if path.stat().st_mtime >= cutoff:
                continue
            if not dry_run:
                path.unlink()
            removed.append(path.name)

        if removed:
            logger.info(
                "%s %d stale photo(s) from %s",
                "Would remove" if dry_run else "Removed",
                len(removed),
                self.photo_dir,
            )
        return removed


def run_photo_cleanup(
    roster: RosterService,
    photos: PhotoService,
    max_age_days: float,
    *,
    dry_run: bool = False,
) -> list[str]:
    return photos.cleanup_stale_photos(roster.referenced_photo_urls(), max_age_days, dry_run=dry_run)
