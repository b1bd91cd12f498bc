import mimetypes
from pathlib import Path, PurePosixPath

from app.storage.base import BaseBlobStore
from app.storage.exceptions import BlobNotFoundError, StorageError
from app.storage.models import BlobEntry, StoredBlob

_DEFAULT_CONTENT_TYPE = "application/octet-stream"

mimetypes.add_type("message/rfc822", ".eml")
mimetypes.add_type("text/markdown", ".md")


class LocalBlobStore(BaseBlobStore):
    """Serves evidence files from a directory tree on local disk.

    Storage paths look like `{user_id}/{case_id}/{file_name}` and are resolved
    relative to the configured root.
    """

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = (files_root if files_root is not None else self.FILES_ROOT).resolve()

    def download(self, path: str) -> StoredBlob:
        resolved = self._resolve(path)
        if not resolved.is_file():
            raise BlobNotFoundError(f"File not found: {path}")
        try:
            data = resolved.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc
        return StoredBlob(data=data, content_type=guess_content_type(path))

    def list(self, directory: str, name_filter: str | None = None) -> list[BlobEntry]:
        resolved = self._resolve(directory)
        try:
            children = sorted(resolved.iterdir())
            return [
                BlobEntry(name=child.name, size=child.stat().st_size)
                for child in children
                if child.is_file() and (name_filter is None or name_filter in child.name)
            ]
        except OSError as exc:
            raise StorageError(f"Failed to list {directory}: {exc}") from exc

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path.lstrip("/"))
        resolved = (self._files_root / relative).resolve()
        if resolved != self._files_root and self._files_root not in resolved.parents:
            raise StorageError(f"Path escapes storage root: {path}")
        return resolved


def guess_content_type(path: str) -> str:
    """Guess a MIME type from the file name, defaulting to octet-stream."""
    content_type, _encoding = mimetypes.guess_type(path)
    return content_type or _DEFAULT_CONTENT_TYPE
