"""Storage service for uploaded post images.

This module provides a service class (UploadService) that validates and
stores image uploads on the local filesystem:

- Per-file validation with a typed accept/reject result
- Path generation: ``<root>/<user_id>/<millis>-<sanitized name>``
- Prometheus counters for accepted and rejected files and stored bytes

The whole request is rejected before anything is written if any file fails
validation.
"""

import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile
from prometheus_client import Counter
from starlette.concurrency import run_in_threadpool

from ..core.exceptions import StorageError, ValidationError
from ..core.logging import ContextLogger
from ..repositories import to_object_id

logger = ContextLogger(__name__)

upload_files_total = Counter(
    "snapgram_upload_files_total",
    "Total number of uploaded files by outcome",
    ["status"],
)

upload_bytes_total = Counter(
    "snapgram_upload_bytes_total",
    "Total bytes of image data written to storage",
)


def sanitize_filename(filename: str) -> str:
    """Remove non-ASCII and path-hostile characters from a filename.

    Args:
        filename: The client-supplied file name.

    Returns:
        A name safe to place inside a single directory, never empty.
    """
    filename = Path(filename).name

    filename = re.sub(r"[^\x00-\x7F]+", "", filename)

    # Replace invalid filename characters with underscore
    filename = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", filename)

    filename = re.sub(r"_+", "_", filename)

    filename = filename.strip("_ .")

    if not filename:
        filename = "untitled"

    return filename


def _millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class FileCheck:
    """Outcome of validating one uploaded file."""

    accepted: bool
    reason: str | None = None


def check_image(content_type: str | None) -> FileCheck:
    """Accept only ``image/*`` MIME types."""
    if content_type and content_type.lower().startswith("image/"):
        return FileCheck(accepted=True)
    return FileCheck(accepted=False, reason="Only images allowed!")


class UploadService:
    """Stores image uploads under a directory per user.

    Attributes:
        root: Upload root directory.
        max_files: Maximum number of files accepted in one request.
    """

    def __init__(self, root: str | Path, max_files: int = 10) -> None:
        self.root = Path(root)
        self.max_files = max_files

    def generate_path(
        self, user_id: str, original_filename: str, taken: set[Path] | None = None
    ) -> Path:
        """Build the storage path for one file.

        The millisecond timestamp prefix keeps repeated uploads of the same
        name apart. A path already in ``taken`` or on disk gets a random
        suffix after the timestamp.
        """
        name = sanitize_filename(original_filename)
        stamp = _millis()
        target = self.root / user_id / f"{stamp}-{name}"
        while (taken and target in taken) or target.exists():
            target = self.root / user_id / f"{stamp}-{uuid.uuid4().hex[:8]}-{name}"
        return target

    def validate(self, user_id: str | None, files: list[UploadFile]) -> None:
        """Check the whole request before anything is stored.

        Raises:
            ValidationError: On a missing or malformed user id, no files, too
                many files, or any non-image file.
        """
        if not user_id or to_object_id(user_id) is None:
            raise ValidationError("Invalid user ID!")
        if not files:
            raise ValidationError("Picture(s) missing!")
        if len(files) > self.max_files:
            upload_files_total.labels(status="rejected").inc(len(files))
            raise ValidationError(
                f"Too many files! At most {self.max_files} images per upload.",
                details={"max_files": self.max_files, "received": len(files)},
            )

        for upload in files:
            result = check_image(upload.content_type)
            if not result.accepted:
                upload_files_total.labels(status="rejected").inc()
                raise ValidationError(
                    result.reason,
                    details={
                        "file": upload.filename,
                        "content_type": upload.content_type,
                    },
                )

    async def save(self, user_id: str | None, files: list[UploadFile]) -> list[str]:
        """Validate and store ``files``, returning ``<user_id>/<name>`` paths."""
        self.validate(user_id, files)

        stored: list[str] = []
        taken: set[Path] = set()
        for upload in files:
            target = self.generate_path(user_id, upload.filename or "", taken)
            taken.add(target)
            data = await upload.read()
            try:
                await run_in_threadpool(self._write, target, data)
            except OSError as e:
                upload_files_total.labels(status="failed").inc()
                logger.exception(
                    "Failed to store upload", extra={"target": str(target)}
                )
                raise StorageError(f"Failed to store {upload.filename}") from e

            upload_files_total.labels(status="stored").inc()
            upload_bytes_total.inc(len(data))
            stored.append(f"{user_id}/{target.name}")

        logger.info(
            "Images stored",
            extra={"user_id": user_id, "count": len(stored)},
        )
        return stored

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
