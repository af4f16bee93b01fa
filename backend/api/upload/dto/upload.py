"""Upload Data Transfer Objects."""

from pydantic import BaseModel


class UploadResponse(BaseModel):
    id: str
    filename: str
    size: int
    downloads: int


class ChunkResponse(BaseModel):
    done: bool
