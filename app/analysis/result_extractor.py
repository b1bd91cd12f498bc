"""Recovers structured results from free-form model output."""

import json
import re
from typing import Any

from app.analysis.models import StructuredResult
from app.logging.logger import Log

_FENCED_BLOCK = re.compile(r"```([^\n`]*)\n([\s\S]*?)```")
_JSON_FENCE_TAGS = frozenset({"", "json"})
_BARE_SPAN = re.compile(r"(\{[\s\S]*\}|\[[\s\S]*\])")

DEFAULT_CATEGORY = "Uncategorized"


def extract_json(raw: str) -> dict[str, Any] | list[Any] | None:
    """Parse the JSON object or array embedded in `raw`.

    Untagged or `json` fenced code blocks are tried first, in order, then the
    bare brace/bracket span. Returns None when no candidate parses.
    """
    candidates = [
        match.group(2).strip()
        for match in _FENCED_BLOCK.finditer(raw)
        if match.group(1).strip().lower() in _JSON_FENCE_TAGS
    ]
    bare = _BARE_SPAN.search(raw)
    if bare is not None:
        candidates.append(bare.group(1))
    if not candidates:
        Log.warning("No JSON span found in model output")
        return None

    for candidate in candidates:
        parsed = _parse_candidate(candidate)
        if parsed is not None:
            return parsed
    return None


def _parse_candidate(candidate: str) -> dict[str, Any] | list[Any] | None:
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        Log.warning(f"Failed to parse JSON span from model output: {exc}")
        Log.debug(f"Unparseable span:\n{candidate}")
        return None
    if not isinstance(parsed, (dict, list)):
        Log.warning("Model output JSON is neither an object nor an array")
        return None
    return parsed


def build_structured_result(data: Any, fallback_name: str) -> StructuredResult | None:
    """Validate extracted JSON against the result schema.

    `description` is required; the other fields get defaults.
    """
    if not isinstance(data, dict):
        Log.warning("Structured result must be a JSON object")
        return None
    description = data.get("description")
    if not isinstance(description, str) or not description.strip():
        Log.warning("Structured result is missing a description")
        return None

    suggested_name = data.get("suggested_name")
    if not isinstance(suggested_name, str) or not suggested_name.strip():
        suggested_name = fallback_name
    category = data.get("category")
    if not isinstance(category, str) or not category.strip():
        category = DEFAULT_CATEGORY

    return StructuredResult(
        suggested_name=suggested_name.strip(),
        description=description.strip(),
        tags=_clean_tags(data.get("tags")),
        category=category.strip(),
    )


def build_chunk_summary(data: Any) -> str | None:
    """Validate a chunk-level summary; key points become bullet lines."""
    if not isinstance(data, dict):
        return None
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        return None
    lines = [summary.strip()]
    key_points = data.get("key_points")
    if isinstance(key_points, list):
        lines.extend(
            f"- {point.strip()}"
            for point in key_points
            if isinstance(point, str) and point.strip()
        )
    return "\n".join(lines)


def _clean_tags(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    tags: list[str] = []
    for item in raw:
        tag = str(item).strip() if isinstance(item, (str, int, float)) else ""
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)
