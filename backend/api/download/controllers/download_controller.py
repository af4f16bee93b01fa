"""Download controller — handles file downloads."""

import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from context import RelayContext, get_context
from errors import NotFound
from api.download.services import download_service

router = APIRouter(tags=["Download"])

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def _content_disposition(filename: str) -> str:
    filename = _CONTROL_CHARS.sub("", filename)
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/{file_id}")
async def download_file(file_id: str, context: RelayContext = Depends(get_context)):
    """Stream a shared file to the requester."""
    try:
        download = await download_service.retrieve(context, file_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="File not found or expired")

    try:
        return StreamingResponse(
            download.iterfile(),
            media_type="application/octet-stream",
            headers={
                "Content-Disposition": _content_disposition(download.filename),
                "Content-Length": str(download.size),
            },
            # Also runs when the client disconnects before the body is read.
            background=BackgroundTask(download.finish),
        )
    except Exception:
        await download.finish()
        raise
