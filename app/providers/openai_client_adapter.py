import base64

import httpx
import openai

from app.providers.base import BaseModelClient
from app.providers.exceptions import ModelNetworkError, ModelResponseError, RateLimitedError
from app.providers.models import InlinePart, ModelRequest, ModelResponse


class OpenAIClientAdapter(BaseModelClient):
    """Model client built on the OpenAI-compatible chat completions API."""

    name = "openai"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def invoke(self, request: ModelRequest) -> ModelResponse:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=request.temperature,
                response_format={"type": "json_object"},
                messages=[{"role": "user", "content": self._build_content(request)}],
            )
        except openai.RateLimitError as exc:
            raise RateLimitedError(f"AI provider rate limit: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ModelNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ModelNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ModelResponseError("AI returned no choices")
        choice = response.choices[0]
        refusal = getattr(choice.message, "refusal", None)
        if isinstance(refusal, str) and refusal:
            return ModelResponse(text="", block_reason="REFUSAL", safety_details=[refusal])
        if choice.finish_reason == "content_filter":
            return ModelResponse(text="", block_reason="CONTENT_FILTER")
        content = choice.message.content
        if content is None:
            raise ModelResponseError("AI returned empty response")
        return ModelResponse(text=content)

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _build_content(request: ModelRequest) -> str | list[dict[str, object]]:
        if not request.parts:
            return request.prompt
        content: list[dict[str, object]] = [{"type": "text", "text": request.prompt}]
        for index, part in enumerate(request.parts):
            content.append(_part_to_content(part, index))
        return content


def _data_url(part: InlinePart) -> str:
    encoded = base64.b64encode(part.data).decode("ascii")
    return f"data:{part.mime_type};base64,{encoded}"


def _part_to_content(part: InlinePart, index: int) -> dict[str, object]:
    if part.mime_type.startswith("image/"):
        return {"type": "image_url", "image_url": {"url": _data_url(part)}}
    return {
        "type": "file",
        "file": {"filename": f"attachment-{index + 1}.pdf", "file_data": _data_url(part)},
    }
