from app.analysis.activity import ActivityRecorder
from app.analysis.exceptions import MalformedModelOutputError, SafetyBlockedError
from app.analysis.models import StructuredResult
from app.analysis.result_extractor import build_structured_result, extract_json
from app.analysis.retry import RetryingModelInvoker
from app.logging.logger import Log
from app.providers.base import BaseModelClient
from app.providers.models import ModelRequest


class DocumentAnalyzer:
    """Makes a single whole-document model call and validates its structured result.

    Used for direct (unchunked) analysis and for the final synthesis call,
    where a safety block or malformed output is fatal.
    """

    def __init__(
        self,
        *,
        client: BaseModelClient,
        invoker: RetryingModelInvoker,
        activity: ActivityRecorder,
    ) -> None:
        self._client = client
        self._invoker = invoker
        self._activity = activity

    def analyze(
        self,
        request: ModelRequest,
        *,
        description: str,
        fallback_name: str,
    ) -> StructuredResult:
        response = self._invoker.invoke(
            lambda: self._client.invoke(request),
            description=description,
            activity=self._activity,
        )
        if response.blocked:
            raise SafetyBlockedError(
                f"{description} was blocked for safety reasons. "
                f"Reason: {response.describe_block()}."
            )

        Log.debug(f"{description} raw response:\n{response.text}")
        result = build_structured_result(extract_json(response.text), fallback_name)
        if result is None:
            raise MalformedModelOutputError(
                f"Failed to get a valid JSON summary from the AI during {description.lower()}. "
                f"Response: {response.text[:500]}"
            )
        return result
