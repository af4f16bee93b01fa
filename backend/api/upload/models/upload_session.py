"""In-progress upload bookkeeping."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from api.upload.services.sink import ReassemblySink


class SessionState(str, Enum):
    OPEN = "open"
    RECEIVING = "receiving"
    FINALIZING = "finalizing"
    CLOSED = "closed"
    ABORTED = "aborted"


class ChunkResult(str, Enum):
    IGNORED = "ignored"
    ACCEPTED = "accepted"
    COMPLETE = "complete"


@dataclass
class UploadSession:
    id: str
    expected_size: int
    sink: ReassemblySink
    # Resolved by the sink close, awaited by the request that finished the upload.
    finished: asyncio.Future
    finishing: bool = False
    bytes_received: int = 0
    chunk_buffer: dict[int, bytes] = field(default_factory=dict)
    next_index: int = 0
    state: SessionState = SessionState.OPEN
