from __future__ import annotations

import base64
import binascii
import os
import re
import tempfile
from contextlib import contextmanager
from typing import Iterator
from urllib.parse import unquote_to_bytes

from domain.models import PhotoAttachments
from domain.ports import LoggerPort

_DATA_URI_PATTERN = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[\w.+-]+=[^;,]*)*)(?P<base64>;base64)?,(?P<payload>.*)$",
    re.DOTALL,
)
_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "image/heic": ".heic",
}


def decode_data_uri(value: str) -> tuple[bytes, str] | None:
    """
    Decode a ``data:`` URI into raw bytes plus a file extension.

    Returns ``None`` for anything that is not a data URI so callers can
    skip it. Missing or extra base64 padding is tolerated; a payload that
    still cannot be decoded raises ``binascii.Error``.
    """
    match = _DATA_URI_PATTERN.match(value.strip())
    if match is None:
        return None
    payload = match.group("payload")
    if match.group("base64"):
        data = _b64decode_padded(payload)
    else:
        data = unquote_to_bytes(payload)
    extension = _EXTENSIONS.get((match.group("mime") or "").lower(), ".jpg")
    return data, extension


def _b64decode_padded(payload: str) -> bytes:
    compact = "".join(payload.split()).rstrip("=")
    return base64.b64decode(compact + "=" * (-len(compact) % 4))


@contextmanager
def staged_photo_files(
    photos: PhotoAttachments,
    *,
    directory: str | None = None,
    logger: LoggerPort | None = None,
) -> Iterator[list[str]]:
    """
    Write each embedded photo to a temporary file for the duration of the block.

    Payloads that are not data URIs, or whose base64 cannot be decoded, are
    skipped. The files are deleted on exit whether or not the block raised.
    """
    paths: list[str] = []
    try:
        for label, payload in photos.labelled():
            try:
                decoded = decode_data_uri(payload)
            except binascii.Error as exc:
                if logger is not None:
                    logger.warning("photo_decode_failed", photo=label, error=str(exc))
                continue
            if decoded is None:
                continue
            data, extension = decoded
            fd, path = tempfile.mkstemp(prefix=f"quote_{label}_", suffix=extension, dir=directory)
            paths.append(path)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        yield list(paths)
    finally:
        for path in paths:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass
