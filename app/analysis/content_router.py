from app.analysis.models import AnalysisStrategy

_DOCUMENT_TYPES = frozenset({"application/pdf"})
_TEXT_APPLICATION_TYPES = frozenset(
    {
        "application/json",
        "application/xml",
        "application/x-ndjson",
        "application/csv",
        "application/rtf",
    }
)


def route_content(mime_type: str | None) -> AnalysisStrategy:
    """Map a MIME type to the strategy used to analyze it."""
    essence = (mime_type or "").split(";", 1)[0].strip().lower()
    if not essence:
        return AnalysisStrategy.UNSUPPORTED
    if essence.startswith("image/"):
        return AnalysisStrategy.IMAGE
    if essence in _DOCUMENT_TYPES:
        return AnalysisStrategy.DOCUMENT
    if essence.startswith(("text/", "message/")) or essence in _TEXT_APPLICATION_TYPES:
        return AnalysisStrategy.TEXT
    return AnalysisStrategy.UNSUPPORTED
