class StorageError(Exception):
    """Raised when the blob store cannot serve a request."""


class BlobNotFoundError(StorageError):
    """Raised when the requested blob does not exist."""
