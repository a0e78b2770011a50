"""
Page Builder Kernel -- File Reading

Turns a file picked in the chooser into a self-contained data URI. The page
must stay one portable document, so a filesystem path never reaches a node.

Reading happens off the event loop; the coroutine resumes on the loop once
the bytes are in, which is the only point an upload suspends.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_MIME = "application/octet-stream"


class FileReadError(Exception):
    """The chosen file could not be read."""
    pass


def to_data_uri(data: bytes, mime: str | None = None) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime or DEFAULT_MIME};base64,{encoded}"


def guess_mime(path: Path) -> str:
    mime, _ = mimetypes.guess_type(path.name)
    return mime or DEFAULT_MIME


async def read_data_uri(source: Path | str | bytes, mime: str | None = None) -> str:
    """
    Read a file (or raw bytes already handed over by a chooser) as a data URI.
    Raises FileReadError if the file cannot be read.
    """
    if isinstance(source, bytes):
        return to_data_uri(source, mime)

    path = Path(source)
    try:
        data = await asyncio.to_thread(path.read_bytes)
    except OSError as e:
        raise FileReadError(f"Failed to read {path}: {e}") from e

    logger.debug("read %d bytes from %s", len(data), path)
    return to_data_uri(data, mime or guess_mime(path))
