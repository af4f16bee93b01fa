"""Upload controller — session creation and chunk submission."""

import logging
from urllib.parse import unquote

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from context import RelayContext, get_context
from errors import StorageWriteFailure, ValidationError
from api.upload.dto.upload import ChunkResponse, UploadResponse
from api.upload.models.upload_session import ChunkResult
from api.upload.services import upload_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])


@router.post("/new", response_model=UploadResponse)
async def new_upload(
    request: Request,
    response: Response,
    context: RelayContext = Depends(get_context),
):
    """Start an upload and return its identifier."""
    try:
        upload = await upload_service.create_upload(
            context,
            size_str=request.headers.get("X-Filesize"),
            filename=unquote(request.headers.get("X-Filename", "")),
            downloads_str=request.headers.get("X-Dcount"),
        )
    except (ValidationError, StorageWriteFailure) as e:
        raise HTTPException(status_code=500, detail=str(e))

    response.headers["X-File-ID"] = upload.id
    return upload


@router.post("/data", response_model=ChunkResponse)
async def upload_chunk(
    request: Request,
    response: Response,
    context: RelayContext = Depends(get_context),
):
    """Accept one chunk; the response for the final chunk waits for the file to close."""
    file_id = request.headers.get("X-File-ID", "")
    if file_id not in context.sessions:
        logger.warning("Data sent to /data with no pending upload at ID %s", file_id)
        raise HTTPException(status_code=404, detail="No pending upload")

    block_size = upload_service.parse_int(request.headers.get("Content-Length"))
    index = upload_service.parse_int(request.headers.get("X-Block-ID"))
    if block_size is None or index is None:
        raise HTTPException(status_code=500, detail="Missing Content-Length or X-Block-ID")

    data = await request.body()

    try:
        result = await upload_service.submit_chunk(context, file_id, index, data)
    except StorageWriteFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    if result is ChunkResult.IGNORED:
        raise HTTPException(status_code=404, detail="No pending upload")

    if result is ChunkResult.COMPLETE:
        response.headers["X-Done"] = "y"
        return ChunkResponse(done=True)
    return ChunkResponse(done=False)
