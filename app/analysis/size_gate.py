from app.analysis.models import SizeDecision

DEFAULT_MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024


def evaluate_size(
    size_bytes: int | None,
    max_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
) -> SizeDecision:
    """Decide whether a document of `size_bytes` may be analyzed.

    An unknown size is eligible but flagged, so the final description can
    say it was produced without a verified size.
    """
    if size_bytes is None:
        return SizeDecision(eligible=True, size_unknown=True)
    if size_bytes > max_bytes:
        return SizeDecision(
            eligible=False,
            reason=(
                f"File size ({format_size(size_bytes)}) exceeds the "
                f"{format_size(max_bytes)} limit for analysis"
            ),
        )
    return SizeDecision(eligible=True)


def format_size(size_bytes: int) -> str:
    return f"{size_bytes / (1024 * 1024):.2f} MB"
