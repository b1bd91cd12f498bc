import base64
import json
from collections.abc import Callable

import httpx
import pytest

from app.providers.exceptions import ModelNetworkError, ModelResponseError, RateLimitedError
from app.providers.gemini_client_adapter import GeminiClientAdapter
from app.providers.models import InlinePart, ModelRequest


def _make_adapter(handler: Callable[[httpx.Request], httpx.Response]) -> GeminiClientAdapter:
    return GeminiClientAdapter(
        api_key="secret",
        model="gemini-test",
        timeout_seconds=5,
        base_url="https://gemini.test/v1beta/",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def _text_body(text: str) -> dict[str, object]:
    return {
        "candidates": [
            {"content": {"parts": [{"text": text}]}, "finishReason": "STOP"},
        ]
    }


class TestGeminiRequest:
    def test_posts_generate_content(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_text_body('{"ok": true}'))

        response = _make_adapter(handler).invoke(ModelRequest(prompt="hello", temperature=0.3))

        assert response.text == '{"ok": true}'
        (request,) = seen
        assert str(request.url) == "https://gemini.test/v1beta/models/gemini-test:generateContent"
        assert request.headers["x-goog-api-key"] == "secret"
        payload = json.loads(request.content)
        assert payload["contents"][0]["parts"] == [{"text": "hello"}]
        assert payload["generationConfig"]["temperature"] == 0.3

    def test_inline_parts_are_base64(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_text_body("{}"))

        _make_adapter(handler).invoke(
            ModelRequest(prompt="p", parts=(InlinePart(mime_type="image/jpeg", data=b"\xff\xd8"),))
        )

        inline = json.loads(seen[0].content)["contents"][0]["parts"][1]["inlineData"]
        assert inline["mimeType"] == "image/jpeg"
        assert base64.b64decode(inline["data"]) == b"\xff\xd8"

    def test_joins_text_parts(self) -> None:
        body = {"candidates": [{"content": {"parts": [{"text": "{\"a\":"}, {"text": " 1}"}]}}]}
        adapter = _make_adapter(lambda _r: httpx.Response(200, json=body))

        assert adapter.invoke(ModelRequest(prompt="p")).text == '{"a": 1}'


class TestGeminiSafety:
    def test_prompt_feedback_block(self) -> None:
        body = {
            "promptFeedback": {
                "blockReason": "SAFETY",
                "safetyRatings": [
                    {"category": "HARM_CATEGORY_HARASSMENT", "probability": "HIGH"},
                ],
            }
        }
        adapter = _make_adapter(lambda _r: httpx.Response(200, json=body))

        response = adapter.invoke(ModelRequest(prompt="p"))

        assert response.block_reason == "SAFETY"
        assert response.describe_block() == "SAFETY. Details: [HARM_CATEGORY_HARASSMENT: HIGH]"

    def test_candidate_finish_reason_block(self) -> None:
        body = {"candidates": [{"finishReason": "PROHIBITED_CONTENT"}]}
        adapter = _make_adapter(lambda _r: httpx.Response(200, json=body))

        response = adapter.invoke(ModelRequest(prompt="p"))

        assert response.blocked
        assert response.block_reason == "PROHIBITED_CONTENT"


class TestGeminiErrors:
    def test_http_429_is_rate_limited(self) -> None:
        body = {"error": {"code": 429, "status": "RESOURCE_EXHAUSTED", "message": "Quota exceeded"}}
        adapter = _make_adapter(lambda _r: httpx.Response(429, json=body))

        with pytest.raises(RateLimitedError, match="Quota exceeded"):
            adapter.invoke(ModelRequest(prompt="p"))

    def test_resource_exhausted_status_is_rate_limited(self) -> None:
        body = {"error": {"status": "RESOURCE_EXHAUSTED", "message": "Try later"}}
        adapter = _make_adapter(lambda _r: httpx.Response(503, json=body))

        with pytest.raises(RateLimitedError):
            adapter.invoke(ModelRequest(prompt="p"))

    def test_server_error_is_network_error(self) -> None:
        adapter = _make_adapter(lambda _r: httpx.Response(500, text="internal"))

        with pytest.raises(ModelNetworkError, match="HTTP 500"):
            adapter.invoke(ModelRequest(prompt="p"))

    def test_connection_error_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ModelNetworkError, match="network error"):
            _make_adapter(handler).invoke(ModelRequest(prompt="p"))

    def test_no_candidates(self) -> None:
        adapter = _make_adapter(lambda _r: httpx.Response(200, json={}))

        with pytest.raises(ModelResponseError, match="no candidates"):
            adapter.invoke(ModelRequest(prompt="p"))

    def test_empty_text(self) -> None:
        adapter = _make_adapter(lambda _r: httpx.Response(200, json=_text_body("  ")))

        with pytest.raises(ModelResponseError, match="empty response"):
            adapter.invoke(ModelRequest(prompt="p"))

    def test_non_json_body(self) -> None:
        adapter = _make_adapter(lambda _r: httpx.Response(200, text="<html>"))

        with pytest.raises(ModelResponseError, match="non-JSON"):
            adapter.invoke(ModelRequest(prompt="p"))

    def test_array_error_body_is_network_error(self) -> None:
        adapter = _make_adapter(lambda _r: httpx.Response(500, json=[{"error": "boom"}]))

        with pytest.raises(ModelNetworkError, match="HTTP 500"):
            adapter.invoke(ModelRequest(prompt="p"))

    def test_scalar_error_body_on_429_is_rate_limited(self) -> None:
        adapter = _make_adapter(lambda _r: httpx.Response(429, json="slow down"))

        with pytest.raises(RateLimitedError):
            adapter.invoke(ModelRequest(prompt="p"))


class TestGeminiClose:
    def test_closes_client_it_created(self) -> None:
        adapter = GeminiClientAdapter(api_key="k", model="m", timeout_seconds=5)

        adapter.close()

        assert adapter._http.is_closed

    def test_leaves_injected_client_open(self) -> None:
        http_client = httpx.Client(
            transport=httpx.MockTransport(lambda _r: httpx.Response(200, json={}))
        )
        adapter = GeminiClientAdapter(
            api_key="k", model="m", timeout_seconds=5, http_client=http_client
        )

        adapter.close()

        assert not http_client.is_closed
        http_client.close()
