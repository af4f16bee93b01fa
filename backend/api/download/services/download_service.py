"""Download service — serves a file and spends one unit of its allowance."""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterator

from context import RelayContext
from errors import NotFound

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


@dataclass
class Download:
    context: RelayContext
    file_id: str
    filename: str
    size: int
    remaining: int
    finished: bool = field(default=False, init=False)

    async def iterfile(self) -> AsyncIterator[bytes]:
        try:
            reader = await self.context.storage.open_reader(self.file_id)
            try:
                while chunk := await reader.read(CHUNK_SIZE):
                    yield chunk
            finally:
                await reader.close()
        finally:
            await self.finish()

    async def finish(self) -> None:
        """Remove the file if this download took the last unit. Safe to call twice."""
        if self.finished:
            return
        self.finished = True

        logger.info("Sent %s[%d]", self.file_id, self.remaining)
        if self.remaining <= 0:
            await self.context.registry.remove(self.file_id)


async def retrieve(context: RelayContext, file_id: str) -> Download:
    """Decrement the allowance before any byte is sent.

    A second request arriving while the first is still streaming sees the
    decremented count. The stored file is only opened once the body is
    iterated; ``Download.finish`` must run however the response ends.
    """
    registry = context.registry
    record = registry.lookup(file_id)
    if not record.complete or record.downloads_remaining <= 0:
        raise NotFound(file_id)

    remaining = registry.consume_download(file_id)

    try:
        size = context.storage.size(file_id)
    except NotFound:
        logger.warning("%s is registered but its bytes are missing", file_id)
        await registry.remove(file_id)
        raise

    return Download(
        context=context,
        file_id=file_id,
        filename=record.filename,
        size=size,
        remaining=remaining,
    )
