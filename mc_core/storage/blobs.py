# mc_core/storage/blobs.py
from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from django.core.files.base import ContentFile, File
from django.core.files.storage import default_storage
from django.utils import timezone

from mc_core.common.conf import mc_setting
from mc_core.common.exceptions import InputValidationError, TransientStorageError
from mc_core.common.retry import retry_with_backoff
from mc_core.common.validation import validate_file_size, validate_file_type

logger = logging.getLogger(__name__)

IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
DOCUMENT_TYPES = IMAGE_TYPES + ("application/pdf",)

ProgressCallback = Callable[[int, int], None]

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class UploadResult:
    path: str
    url: str
    size: int


def safe_name(filename: str) -> str:
    base = os.path.basename(filename or "") or "file"
    return _UNSAFE.sub("_", base)


def _stamp() -> int:
    return int(timezone.now().timestamp() * 1000)


def profile_photo_folder(user_id) -> str:
    return f"users/{user_id}/profile/"


def profile_photo_path(user_id, filename: str) -> str:
    return f"{profile_photo_folder(user_id)}{_stamp()}_{safe_name(filename)}"


def doctor_document_path(user_id, filename: str) -> str:
    return f"doctors/{user_id}/documents/{_stamp()}_{safe_name(filename)}"


def pharmacy_document_path(user_id, filename: str) -> str:
    return f"pharmacies/{user_id}/documents/{_stamp()}_{safe_name(filename)}"


def chat_attachment_path(conversation_id: str, kind: str, filename: str) -> str:
    folder = "images" if kind == "image" else "files"
    return f"chats/{conversation_id}/{folder}/{_stamp()}_{safe_name(filename)}"


class BlobStore:
    """
    Thin wrapper over a Django storage backend.

    Uploads are validated locally first (never retried), then written with
    bounded exponential backoff on transient failures.
    """

    retry_on = (OSError, TransientStorageError)

    def __init__(
        self,
        storage=None,
        *,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        max_size_mb: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.storage = storage if storage is not None else default_storage
        self.max_attempts = int(max_attempts if max_attempts is not None else mc_setting("MC_UPLOAD_MAX_ATTEMPTS"))
        self.base_delay = float(base_delay if base_delay is not None else mc_setting("MC_UPLOAD_BASE_DELAY_SECONDS"))
        self.max_size_mb = float(max_size_mb if max_size_mb is not None else mc_setting("MC_UPLOAD_MAX_SIZE_MB"))
        self.sleep = sleep

    def validate(self, *, size: int, content_type: str | None = None, allowed_types: Iterable[str] | None = None) -> None:
        if size <= 0:
            raise InputValidationError("File is empty.", details={"field": "file"})
        validate_file_size(size, self.max_size_mb)
        if allowed_types is not None:
            validate_file_type(content_type, allowed_types)

    def upload(
        self,
        path: str,
        content,
        *,
        content_type: str | None = None,
        allowed_types: Iterable[str] | None = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> UploadResult:
        if isinstance(content, (bytes, bytearray)):
            content = ContentFile(bytes(content))
        elif not isinstance(content, File):
            content = File(content)

        size = content.size or 0
        if content_type is None:
            content_type = getattr(content, "content_type", None)
        self.validate(size=size, content_type=content_type, allowed_types=allowed_types)

        def _write() -> str:
            if hasattr(content, "seek"):
                content.seek(0)
            if on_progress:
                on_progress(0, size)
            saved = self.storage.save(path, content)
            if on_progress:
                on_progress(size, size)
            return saved

        try:
            saved_path = retry_with_backoff(
                _write,
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                retry_on=self.retry_on,
                sleep=self.sleep,
                label=f"upload {path}",
            )
        except TransientStorageError:
            raise
        except OSError as e:
            raise TransientStorageError(
                f"Upload failed after {self.max_attempts} attempts.",
                details={"path": path, "error": str(e)},
            ) from e

        logger.info("Uploaded %s (%s bytes)", saved_path, size)
        return UploadResult(path=saved_path, url=self.url(saved_path), size=size)

    def delete(self, path: str) -> None:
        if not path:
            return
        retry_with_backoff(
            lambda: self.storage.delete(path),
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            retry_on=self.retry_on,
            sleep=self.sleep,
            label=f"delete {path}",
        )

    def url(self, path: str) -> str:
        try:
            return self.storage.url(path)
        except NotImplementedError:
            return path

    def exists(self, path: str) -> bool:
        return self.storage.exists(path)
