"""Reassembly sink — the ordered stream that becomes the stored file."""

import asyncio

from errors import StorageWriteFailure
from storage import FileStorage


class ReassemblySink:
    """Writes and the final close run strictly in the order they were requested.

    The lock is acquired synchronously when nobody holds it and queues
    waiters FIFO, so blocks handed over by successive drains reach the
    file in drain order even though each write suspends.
    """

    def __init__(self, handle):
        self._handle = handle
        self._lock = asyncio.Lock()
        self.closed = False

    @classmethod
    async def open(cls, storage: FileStorage, file_id: str) -> "ReassemblySink":
        try:
            handle = await storage.open_sink(file_id)
        except OSError as e:
            raise StorageWriteFailure(f"Could not create {file_id}: {e}") from e
        return cls(handle)

    async def write(self, blocks: list[bytes]) -> None:
        async with self._lock:
            if self.closed:
                raise StorageWriteFailure("Write after sink was closed")
            try:
                for block in blocks:
                    await self._handle.write(block)
            except (OSError, ValueError) as e:
                raise StorageWriteFailure(f"Error writing data: {e}") from e

    async def close(self) -> None:
        async with self._lock:
            if self.closed:
                return
            self.closed = True
            try:
                await self._handle.close()
            except OSError as e:
                raise StorageWriteFailure(f"Error closing sink: {e}") from e
