"""Files repository — the in-memory registry of shared files.

Records live only as long as the process. Every mutation runs on the
event loop, so no locking is needed.
"""

import asyncio
import logging

from errors import DuplicateId, NotFound
from storage import FileStorage
from api.files.dto.file import FileRecord
from api.upload.services.session_manager import UploadSessionManager

logger = logging.getLogger(__name__)


class FileRegistry:
    def __init__(
        self,
        storage: FileStorage,
        sessions: UploadSessionManager,
        auto_delete_seconds: float = 60 * 60 * 24,
    ):
        self.storage = storage
        self.sessions = sessions
        self.auto_delete_seconds = auto_delete_seconds
        self._records: dict[str, FileRecord] = {}
        self._timers: dict[str, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task] = set()

    def __contains__(self, file_id: str) -> bool:
        return file_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def register(self, file_id: str, filename: str, downloads: int = 1) -> FileRecord:
        if file_id in self._records:
            raise DuplicateId(file_id)
        record = FileRecord(id=file_id, filename=filename, downloads_remaining=downloads)
        self._records[file_id] = record
        return record

    def lookup(self, file_id: str) -> FileRecord:
        record = self._records.get(file_id)
        if record is None:
            raise NotFound(file_id)
        return record

    def consume_download(self, file_id: str) -> int:
        """Decrement the allowance and return what is left. Never deletes."""
        record = self.lookup(file_id)
        record.downloads_remaining -= 1
        return record.downloads_remaining

    async def remove(self, file_id: str) -> bool:
        """Drop the record, its upload session and its stored bytes.

        The record is gone before the first await, so a failed deletion
        leaves unreachable bytes on disk but never a servable record.
        """
        record = self._records.pop(file_id, None)
        if record is None:
            return False

        timer = self._timers.pop(file_id, None)
        if timer is not None:
            timer.cancel()

        await self.sessions.discard(file_id)
        await self.storage.delete(file_id)
        return True

    def mark_complete(self, file_id: str) -> None:
        """Make a fully received file servable and start its auto-delete timer."""
        record = self._records.get(file_id)
        if record is None:
            return
        record.complete = True
        self.schedule_expiry(file_id)

    def schedule_expiry(self, file_id: str, delay: float | None = None) -> None:
        """Arm the auto-delete timer for a finished upload."""
        if file_id not in self._records:
            return

        previous = self._timers.pop(file_id, None)
        if previous is not None:
            previous.cancel()

        loop = asyncio.get_running_loop()
        self._timers[file_id] = loop.call_later(
            self.auto_delete_seconds if delay is None else delay, self._expire, file_id
        )

    def has_timer(self, file_id: str) -> bool:
        return file_id in self._timers

    def cancel_timers(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    def _expire(self, file_id: str) -> None:
        self._timers.pop(file_id, None)
        if file_id not in self._records:
            return

        logger.info("%s expired", file_id)
        task = asyncio.ensure_future(self.remove(file_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
