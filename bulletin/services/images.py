"""
Image lifecycle — storing uploads and cleaning up replaced files.

``store`` validates type and size before touching the disk, so a rejected
upload never leaves a file behind. ``reconcile`` is best-effort: it reports
problems through ``CleanupResult.warning`` instead of raising, and the
caller logs the warning and carries on.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from bulletin.core.exceptions import FileTooLarge, InvalidFileType, UploadRejected

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"

ALLOWED_MIME_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}

UPLOAD_CATEGORIES: tuple[str, ...] = ("posters", "events", "announcements", "services", "theme")


@dataclass(frozen=True)
class StoredImage:
    url: str
    filename: str
    size: int


@dataclass(frozen=True)
class CleanupResult:
    deleted: bool = False
    warning: str | None = None


class ImageManager:
    def __init__(self, root: Path, max_bytes: int) -> None:
        self.root = Path(root)
        self.uploads_dir = self.root / "uploads"
        self.max_bytes = max_bytes

    # ── Upload ──────────────────────────────────────────────────────
    def validate(self, data: bytes, mime_type: str | None, category: str) -> None:
        if category not in UPLOAD_CATEGORIES:
            raise UploadRejected(f"Invalid category. Use one of: {', '.join(UPLOAD_CATEGORIES)}")
        if (mime_type or "").lower() not in ALLOWED_MIME_TYPES:
            raise InvalidFileType()
        if len(data) > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            raise FileTooLarge(f"File is too large. Maximum size is {limit_mb:g}MB.")
        if not data:
            raise UploadRejected("No file was uploaded")

    def store(
        self,
        data: bytes,
        mime_type: str | None,
        category: str,
        original_filename: str | None = None,
    ) -> StoredImage:
        """Write *data* to ``uploads/<category>/<random><ext>`` and return its URL."""
        self.validate(data, mime_type, category)

        ext = PurePosixPath(original_filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            ext = ALLOWED_MIME_TYPES[(mime_type or "").lower()]
        filename = f"{uuid.uuid4()}{ext}"

        target_dir = self.uploads_dir / category
        target_dir.mkdir(parents=True, exist_ok=True)
        (target_dir / filename).write_bytes(data)

        url = f"{URL_PREFIX}{category}/{filename}"
        logger.info("Stored upload %s (%.2f KB, %s)", url, len(data) / 1024, mime_type)
        return StoredImage(url=url, filename=filename, size=len(data))

    # ── Cleanup ─────────────────────────────────────────────────────
    def path_for(self, url: str) -> Path | None:
        """Filesystem path for a managed URL, or ``None`` if it is not one."""
        if not url.startswith(URL_PREFIX):
            return None
        candidate = (self.root / url.lstrip("/")).resolve()
        uploads = self.uploads_dir.resolve()
        if candidate == uploads or uploads not in candidate.parents:
            return None
        return candidate

    def reconcile(self, old_url: str | None, new_url: str | None) -> CleanupResult:
        """Delete the file behind *old_url* once it is no longer referenced."""
        if not old_url or old_url == new_url:
            return CleanupResult()

        path = self.path_for(old_url)
        if path is None:
            return CleanupResult()

        try:
            path.unlink()
        except FileNotFoundError:
            return CleanupResult()
        except OSError as exc:
            return CleanupResult(warning=f"Could not delete image {old_url}: {exc}")

        logger.info("Deleted old image %s", old_url)
        return CleanupResult(deleted=True)

    def release(self, old_url: str | None, new_url: str | None = None) -> CleanupResult:
        """``reconcile`` plus logging of any warning, for route handlers."""
        result = self.reconcile(old_url, new_url)
        if result.warning:
            logger.warning(result.warning)
        return result
