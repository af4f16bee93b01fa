"""Upload session manager — reassembles chunks that arrive in any order."""

import asyncio
import logging
from typing import Awaitable, Callable

from errors import DuplicateId, StorageWriteFailure
from storage import FileStorage
from api.upload.models.upload_session import ChunkResult, SessionState, UploadSession
from api.upload.services.sink import ReassemblySink

logger = logging.getLogger(__name__)


class UploadSessionManager:
    def __init__(
        self,
        storage: FileStorage,
        max_buffered_chunks: int = 0,
        on_finished: Callable[[str], None] | None = None,
        on_aborted: Callable[[str], Awaitable[object]] | None = None,
    ):
        self.storage = storage
        self.max_buffered_chunks = max_buffered_chunks
        self.on_finished = on_finished
        self.on_aborted = on_aborted
        self._sessions: dict[str, UploadSession] = {}
        self._tasks: set[asyncio.Task] = set()

    def __contains__(self, file_id: str) -> bool:
        return file_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, file_id: str) -> UploadSession | None:
        return self._sessions.get(file_id)

    async def open(self, file_id: str, expected_size: int) -> UploadSession:
        if file_id in self._sessions:
            raise DuplicateId(file_id)

        sink = await ReassemblySink.open(self.storage, file_id)
        session = UploadSession(
            id=file_id,
            expected_size=expected_size,
            sink=sink,
            finished=asyncio.get_running_loop().create_future(),
        )
        self._sessions[file_id] = session
        session.state = SessionState.RECEIVING
        return session

    async def submit_chunk(self, file_id: str, index: int, data: bytes) -> ChunkResult:
        """Buffer one chunk and flush every chunk that is now in sequence.

        Returns COMPLETE only once the sink has been closed. Raises
        StorageWriteFailure after aborting the session when the sink fails.
        """
        session = self._sessions.get(file_id)
        if session is None or session.state is not SessionState.RECEIVING:
            logger.warning("Data sent with no pending upload at ID %s", file_id)
            return ChunkResult.IGNORED

        session.bytes_received += len(data)
        # Already flushed indices are counted but never written again.
        if index >= session.next_index:
            session.chunk_buffer[index] = data

        flushable = []
        while session.next_index in session.chunk_buffer:
            flushable.append(session.chunk_buffer.pop(session.next_index))
            session.next_index += 1

        complete = session.bytes_received >= session.expected_size
        if complete:
            session.state = SessionState.FINALIZING

        try:
            if self.max_buffered_chunks and len(session.chunk_buffer) > self.max_buffered_chunks:
                raise StorageWriteFailure(
                    f"{file_id} holds {len(session.chunk_buffer)} out-of-order chunks"
                )
            if flushable:
                await session.sink.write(flushable)
        except StorageWriteFailure as e:
            logger.error("Upload %s aborted: %s", file_id, e)
            await self._abort(session, e)
            raise

        if not complete:
            return ChunkResult.ACCEPTED

        session.finishing = True
        self._spawn(self._finalize(session))
        await asyncio.shield(session.finished)
        return ChunkResult.COMPLETE

    async def discard(self, file_id: str) -> None:
        """Abort a session without notifying the registry (it is the caller)."""
        session = self._sessions.get(file_id)
        if session is not None:
            await self._abort(session, StorageWriteFailure(f"{file_id} was removed"), notify=False)

    async def _finalize(self, session: UploadSession) -> None:
        if session.chunk_buffer:
            logger.warning(
                "%s closing with %d chunks still buffered", session.id, len(session.chunk_buffer)
            )
        try:
            await session.sink.close()
        except StorageWriteFailure as e:
            logger.error("Upload %s aborted: %s", session.id, e)
            await self._abort(session, e)
            return

        if session.state is not SessionState.FINALIZING:
            return

        session.state = SessionState.CLOSED
        session.chunk_buffer.clear()
        self._sessions.pop(session.id, None)
        logger.info("%s fully received", session.id)

        if self.on_finished is not None:
            self.on_finished(session.id)
        if not session.finished.done():
            session.finished.set_result(True)

    async def _abort(self, session: UploadSession, error: Exception, notify: bool = True) -> None:
        if session.state is SessionState.ABORTED:
            return

        session.state = SessionState.ABORTED
        session.chunk_buffer.clear()
        if self._sessions.get(session.id) is session:
            del self._sessions[session.id]

        try:
            await session.sink.close()
        except StorageWriteFailure as e:
            logger.warning("Could not close sink for %s: %s", session.id, e)

        if notify and self.on_aborted is not None:
            await self.on_aborted(session.id)

        # The completing request answers only once the file is gone.
        if session.finishing and not session.finished.done():
            session.finished.set_exception(error)

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
