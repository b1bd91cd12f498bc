from abc import ABC, abstractmethod

from app.storage.models import BlobEntry, StoredBlob


class BaseBlobStore(ABC):
    """Contract for evidence file storage backends."""

    @abstractmethod
    def download(self, path: str) -> StoredBlob:
        """Fetch the bytes and content type stored at `path`.

        Raises:
            BlobNotFoundError: if nothing is stored at `path`.
            StorageError: on any other storage failure.
        """

    @abstractmethod
    def list(self, directory: str, name_filter: str | None = None) -> list[BlobEntry]:
        """List entries in `directory`, optionally only those whose name contains `name_filter`.

        Raises:
            StorageError: if the directory cannot be listed.
        """
