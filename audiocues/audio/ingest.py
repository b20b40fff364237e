"""Upload and URL ingestion.

Both entry points spool the payload into a transient file, decode it and
remove the file again. ``transient_path`` owns the removal, so every exit
path (rejection, fetch failure, decode failure, success) leaves nothing
behind in ``settings.upload_dir``.
"""

import asyncio
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath

import httpx
from fastapi import UploadFile

from audiocues.analysis.models import SampleBuffer
from audiocues.audio.loader import decode_file
from audiocues.config import settings
from audiocues.errors import (
    FetchError,
    InvalidInputError,
    InvalidTypeError,
    MissingInputError,
    PayloadTooLargeError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
AUDIO_SUFFIXES = {".wav", ".mp3", ".ogg", ".oga", ".flac", ".m4a", ".aac"}


@contextmanager
def transient_path(suffix: str = "") -> Iterator[Path]:
    """Yield a fresh empty file path in the upload directory, removed on exit."""
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(suffix=suffix, dir=upload_dir)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug(f"Removed transient file {path.name}")


def _suffix(name: str | None) -> str:
    if not name:
        return ""
    suffix = PurePosixPath(name).suffix.lower()
    return suffix if suffix in AUDIO_SUFFIXES else ""


async def spool_upload(upload: UploadFile, path: Path, max_bytes: int) -> int:
    """Copy an uploaded payload to *path*, enforcing the size ceiling.

    Returns the number of bytes written.
    """
    written = 0
    with open(path, "wb") as fh:
        while chunk := await upload.read(CHUNK_SIZE):
            written += len(chunk)
            if written > max_bytes:
                raise PayloadTooLargeError(max_bytes)
            fh.write(chunk)
    return written


async def download(url: str, path: Path, max_bytes: int, timeout: float) -> int:
    """Stream the body at *url* into *path*.

    Raises ``FetchError`` on network errors and non-2xx responses, and
    ``PayloadTooLargeError`` once the body grows past *max_bytes*.
    """
    written = 0
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    raise FetchError(f"Fetching audio failed with HTTP {response.status_code}")
                with open(path, "wb") as fh:
                    async for chunk in response.aiter_bytes():
                        written += len(chunk)
                        if written > max_bytes:
                            raise PayloadTooLargeError(max_bytes)
                        fh.write(chunk)
    except httpx.HTTPError as exc:
        raise FetchError(f"Could not fetch audio: {exc}") from exc
    return written


def check_url(url: str | None) -> httpx.URL:
    if not url or not url.strip():
        raise MissingInputError("No audio URL provided")
    try:
        parsed = httpx.URL(url.strip())
    except httpx.InvalidURL as exc:
        raise InvalidInputError(f"Invalid URL: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidInputError("Only http and https URLs are supported")
    return parsed


async def _decode(path: Path) -> SampleBuffer:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, decode_file, path)


async def load_upload(upload: UploadFile | None) -> SampleBuffer:
    """Validate, spool and decode an uploaded audio file."""
    if upload is None or not upload.filename:
        raise MissingInputError("No audio file provided")
    if upload.content_type not in settings.allowed_mime_types:
        raise InvalidTypeError(
            f"Invalid file type '{upload.content_type}'. "
            f"Allowed: {', '.join(settings.allowed_mime_types)}"
        )

    with transient_path(_suffix(upload.filename)) as path:
        size = await spool_upload(upload, path, settings.max_upload_bytes)
        logger.info(f"Received upload {upload.filename!r} ({size} bytes, {upload.content_type})")
        return await _decode(path)


async def load_url(url: str | None) -> SampleBuffer:
    """Fetch and decode audio from a remote http(s) URL."""
    parsed = check_url(url)

    with transient_path(_suffix(parsed.path)) as path:
        size = await download(str(parsed), path, settings.max_upload_bytes, settings.fetch_timeout)
        logger.info(f"Fetched {parsed.host}{parsed.path} ({size} bytes)")
        return await _decode(path)
