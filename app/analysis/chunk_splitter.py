from app.analysis.models import Chunk

DEFAULT_CHUNK_SIZE = 15000


def needs_chunking(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> bool:
    """True when `text` is too long for one direct model call."""
    return len(text) >= chunk_size


def split_text(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[Chunk]:
    """Split `text` into consecutive, non-overlapping chunks of at most `chunk_size` chars.

    Concatenating the chunk texts in order reproduces `text` exactly.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [
        Chunk(
            index=index,
            start=start,
            end=min(start + chunk_size, len(text)),
            text=text[start:start + chunk_size],
        )
        for index, start in enumerate(range(0, len(text), chunk_size))
    ]
