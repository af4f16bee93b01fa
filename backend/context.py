"""Relay context — the shared state handed to every request handler."""

from pathlib import Path

from fastapi import Request

import config
from storage import FileStorage
from api.files.repositories.files_repository import FileRegistry
from api.upload.services.session_manager import UploadSessionManager


class RelayContext:
    def __init__(
        self,
        files_dir: Path = config.FILES_DIR,
        auto_delete_seconds: float = config.AUTO_DELETE_SECONDS,
        max_buffered_chunks: int = config.MAX_BUFFERED_CHUNKS,
        id_length: int = config.ID_LENGTH,
    ):
        self.id_length = id_length
        self.storage = FileStorage(files_dir)
        self.sessions = UploadSessionManager(self.storage, max_buffered_chunks)
        self.registry = FileRegistry(self.storage, self.sessions, auto_delete_seconds)

        self.sessions.on_finished = self.registry.mark_complete
        self.sessions.on_aborted = self.registry.remove

    def close(self) -> None:
        self.registry.cancel_timers()


def get_context(request: Request) -> RelayContext:
    return request.app.state.context
