"""
Sample intake validation.

Pure function of (content, declared media type, declared size). A bad sample
is reported as a rejected ValidationOutcome; nothing here raises for it.
"""

from typing import Iterable, Optional

from core.config import settings
from models.domain.validation import ValidationOutcome

MAGIC_CHECKS = {
    "image/png": lambda b: b.startswith(b"\x89PNG\r\n\x1a\n"),
    "image/jpeg": lambda b: b.startswith(b"\xff\xd8\xff"),
    "image/webp": lambda b: len(b) >= 12 and b[:4] == b"RIFF" and b[8:12] == b"WEBP",
}


def validate(
    content: bytes,
    declared_media_type: str,
    byte_size: int,
    allowed_media_types: Optional[Iterable[str]] = None,
    max_bytes: Optional[int] = None,
) -> ValidationOutcome:
    """
    Check a sample against the intake rules.

    Args:
        content: Raw sample bytes
        declared_media_type: MIME type claimed by the client
        byte_size: Size claimed by the client
        allowed_media_types: Allow-list override (defaults to settings)
        max_bytes: Size cap override (defaults to settings)

    Returns:
        ValidationOutcome.accept() or ValidationOutcome.reject(reason)
    """
    allowed = [t.lower() for t in (allowed_media_types or settings.media_types)]
    cap = max_bytes if max_bytes is not None else settings.max_sample_bytes
    media_type = (declared_media_type or "").split(";")[0].strip().lower()

    if media_type not in allowed:
        return ValidationOutcome.reject(
            f"Invalid file type '{declared_media_type}'. Allowed: {', '.join(allowed)}"
        )

    if byte_size > cap:
        return ValidationOutcome.reject(
            f"File is too large ({byte_size} bytes). Maximum size is {_format_size(cap)}"
        )

    if not content:
        return ValidationOutcome.reject("Empty file")

    if byte_size != len(content):
        return ValidationOutcome.reject(
            f"Declared size {byte_size} does not match content length {len(content)}"
        )

    check = MAGIC_CHECKS.get(media_type)
    if check is not None and not check(content):
        return ValidationOutcome.reject(f"Content is not a valid {media_type} image")

    return ValidationOutcome.accept()


def _format_size(num_bytes: int) -> str:
    if num_bytes % (1024 * 1024) == 0:
        return f"{num_bytes // (1024 * 1024)}MB"
    return f"{num_bytes} bytes"
