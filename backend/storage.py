"""File storage — one stored-byte object per identifier, flat on disk."""

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from errors import NotFound

logger = logging.getLogger(__name__)


class FileStorage:
    def __init__(self, files_dir: Path):
        self.files_dir = Path(files_dir)
        self.files_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, file_id: str) -> Path:
        # Identifiers are letters only; the display name never reaches the path.
        return self.files_dir / file_id

    def exists(self, file_id: str) -> bool:
        return self.path_for(file_id).is_file()

    def size(self, file_id: str) -> int:
        try:
            return self.path_for(file_id).stat().st_size
        except FileNotFoundError:
            raise NotFound(file_id) from None

    def list_ids(self) -> list[str]:
        if not self.files_dir.exists():
            return []
        return [entry.name for entry in self.files_dir.iterdir() if entry.is_file()]

    async def open_sink(self, file_id: str):
        return await aiofiles.open(self.path_for(file_id), "wb")

    async def open_reader(self, file_id: str):
        try:
            return await aiofiles.open(self.path_for(file_id), "rb")
        except FileNotFoundError:
            raise NotFound(file_id) from None

    async def delete(self, file_id: str) -> bool:
        """Best-effort removal. Failures are logged, never raised."""
        try:
            await aiofiles.os.remove(self.path_for(file_id))
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.error("Error deleting %s: %s", file_id, e)
            return False

        logger.info("Deleted %s", file_id)
        return True
