from dataclasses import dataclass


@dataclass(frozen=True)
class StoredBlob:
    """Downloaded file content with its content type."""

    data: bytes
    content_type: str


@dataclass(frozen=True)
class BlobEntry:
    """One listing entry of a storage directory."""

    name: str
    size: int | None
