"""Upload service — creates upload sessions and feeds them chunks."""

import logging
import re

from context import RelayContext
from errors import StorageWriteFailure, ValidationError
from api.upload.dto.upload import UploadResponse
from api.upload.models.upload_session import ChunkResult
from api.upload.services.id_service import generate_unique_id

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def parse_int(value: str | None) -> int | None:
    """Read the leading integer of a header value, e.g. '12', ' 7px' -> 7."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    if not match:
        return None
    return int(match.group(1))


def parse_size(size_str: str | None) -> int:
    size = parse_int(size_str)
    if size is None:
        raise ValidationError(f"Invalid file size: {size_str!r}")
    if size < 0:
        raise ValidationError(f"File size cannot be negative: {size}")
    return size


def clean_filename(filename: str | None) -> str:
    """Display names end up in a response header; drop control characters."""
    return _CONTROL_CHARS.sub("", filename or "")


def parse_downloads(downloads_str: str | None) -> int:
    """Download allowance; anything absent, non-numeric or below 1 means 1."""
    downloads = parse_int(downloads_str)
    if downloads is None or downloads < 1:
        return 1
    return downloads


async def create_upload(
    context: RelayContext,
    size_str: str | None,
    filename: str | None,
    downloads_str: str | None = None,
) -> UploadResponse:
    """Mint an identifier, register the file and open its upload session."""
    size = parse_size(size_str)
    downloads = parse_downloads(downloads_str)

    file_id = generate_unique_id(context.registry, context.id_length)
    record = context.registry.register(file_id, clean_filename(filename), downloads)

    try:
        await context.sessions.open(file_id, size)
    except StorageWriteFailure:
        await context.registry.remove(file_id)
        raise

    logger.info("New file requested id: %s, size: %d", file_id, size)
    return UploadResponse(
        id=file_id,
        filename=record.filename,
        size=size,
        downloads=record.downloads_remaining,
    )


async def submit_chunk(
    context: RelayContext, file_id: str, index: int, data: bytes
) -> ChunkResult:
    """Hand one chunk to the session. A failed write has already removed the file."""
    return await context.sessions.submit_chunk(file_id, index, data)
