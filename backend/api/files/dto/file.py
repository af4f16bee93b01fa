"""File Data Transfer Objects."""

from pydantic import BaseModel


class FileRecord(BaseModel):
    id: str
    filename: str
    downloads_remaining: int = 1
    complete: bool = False
