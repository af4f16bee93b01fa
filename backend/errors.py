"""Errors raised by the relay services and translated by the controllers."""


class RelayError(Exception):
    pass


class ValidationError(RelayError):
    """Bad or missing declared size when creating an upload."""


class NotFound(RelayError):
    """Unknown, finished or expired identifier."""


class DuplicateId(RelayError):
    pass


class StorageWriteFailure(RelayError):
    """The sink could not be written or closed; the upload was aborted."""
