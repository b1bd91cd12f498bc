"""Gemini model client over the Generative Language REST API."""

import base64
from typing import Any

import httpx

from app.providers.base import BaseModelClient
from app.providers.exceptions import ModelNetworkError, ModelResponseError, RateLimitedError
from app.providers.models import ModelRequest, ModelResponse

_BLOCKING_FINISH_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"})


class GeminiClientAdapter(BaseModelClient):
    """Calls `models/{model}:generateContent` and maps safety feedback."""

    name = "gemini"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout_seconds)

    def invoke(self, request: ModelRequest) -> ModelResponse:
        url = f"{self._base_url}/models/{self._model}:generateContent"
        try:
            response = self._http.post(
                url,
                json=self._build_payload(request),
                headers={"x-goog-api-key": self._api_key},
            )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ModelNetworkError(f"AI provider network error: {exc}") from exc
        except httpx.HTTPError as exc:
            raise ModelNetworkError(f"AI provider API error: {exc}") from exc

        if response.status_code >= 400:
            self._raise_for_status(response)

        try:
            body = response.json()
        except ValueError as exc:
            raise ModelResponseError(f"Gemini returned a non-JSON body: {exc}") from exc
        return self._parse_body(body)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    @staticmethod
    def _build_payload(request: ModelRequest) -> dict[str, Any]:
        parts: list[dict[str, Any]] = [{"text": request.prompt}]
        for part in request.parts:
            parts.append(
                {
                    "inlineData": {
                        "mimeType": part.mime_type,
                        "data": base64.b64encode(part.data).decode("ascii"),
                    }
                }
            )
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": request.temperature,
                "responseMimeType": "application/json",
            },
        }

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        status_name = ""
        message = response.text[:200]
        try:
            body = response.json()
        except ValueError:
            body = None
        error_payload = body.get("error") if isinstance(body, dict) else None
        if isinstance(error_payload, dict):
            status_name = str(error_payload.get("status") or "")
            message = str(error_payload.get("message") or message)

        if response.status_code == 429 or status_name == "RESOURCE_EXHAUSTED":
            raise RateLimitedError(f"Gemini rate limit (HTTP {response.status_code}): {message}")
        raise ModelNetworkError(
            f"Gemini request failed with HTTP {response.status_code}: {message}"
        )

    @staticmethod
    def _parse_body(body: dict[str, Any]) -> ModelResponse:
        feedback = body.get("promptFeedback") or {}
        block_reason = feedback.get("blockReason")
        if block_reason:
            return ModelResponse(
                text="",
                block_reason=str(block_reason),
                safety_details=_format_ratings(feedback.get("safetyRatings")),
            )

        candidates = body.get("candidates") or []
        if not candidates:
            raise ModelResponseError("Gemini returned no candidates")
        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if finish_reason in _BLOCKING_FINISH_REASONS:
            return ModelResponse(
                text="",
                block_reason=str(finish_reason),
                safety_details=_format_ratings(candidate.get("safetyRatings")),
            )

        parts = (candidate.get("content") or {}).get("parts") or []
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        text = "".join(texts)
        if not text.strip():
            raise ModelResponseError("Gemini returned empty response")
        return ModelResponse(text=text)


def _format_ratings(ratings: Any) -> list[str]:
    if not isinstance(ratings, list):
        return []
    return [
        f"{rating.get('category')}: {rating.get('probability')}"
        for rating in ratings
        if isinstance(rating, dict)
    ]
