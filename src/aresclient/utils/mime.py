r"""MIME type detection for file uploads."""

from __future__ import annotations

__all__ = ["DEFAULT_MIME_TYPE", "guess_mime_type", "sniff_mime_type"]

import logging
import mimetypes
from pathlib import Path

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"

# Leading-byte signatures of common upload formats
_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
)


def sniff_mime_type(head: bytes) -> str | None:
    """Detect a MIME type from the first bytes of a file.

    Args:
        head: The first bytes of the file.

    Returns:
        The detected MIME type, or None if no signature matches.

    Example:
        ```pycon
        >>> from aresclient.utils.mime import sniff_mime_type
        >>> sniff_mime_type(b"%PDF-1.7 ...")
        'application/pdf'
        >>> sniff_mime_type(b"hello") is None
        True

        ```
    """
    for signature, mime_type in _SIGNATURES:
        if head.startswith(signature):
            return mime_type
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    return None


def guess_mime_type(path: str | Path, content: bytes | None = None) -> str:
    """Guess the MIME type of a file to upload.

    The leading bytes of the content are sniffed first, then the file
    name extension is tried. ``application/octet-stream`` is returned
    when both fail.

    Args:
        path: The path of the file.
        content: The file content, if already read.

    Returns:
        The MIME type of the file.
    """
    if content is None:
        with Path(path).open("rb") as file:
            content = file.read(16)
    mime_type = sniff_mime_type(content[:16])
    if mime_type is not None:
        return mime_type
    mime_type, _ = mimetypes.guess_type(str(path))
    if mime_type is None:
        logger.debug(f"Could not detect MIME type of {path}, using {DEFAULT_MIME_TYPE}")
        return DEFAULT_MIME_TYPE
    return mime_type
