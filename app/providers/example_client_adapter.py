"""Offline model client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseModelClient and register the provider in ModelClientFactory.
"""

import json
from typing import ClassVar

from app.providers.base import BaseModelClient
from app.providers.models import ModelRequest, ModelResponse


class ExampleClientAdapter(BaseModelClient):
    """Returns a fixed response that satisfies both the chunk and result schemas.

    No network calls. Useful for local development and tests.
    """

    name = "example"

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "summary": "Example summary of the supplied content.",
        "key_points": [],
        "suggested_name": "example_document.txt",
        "description": "Example analysis produced without contacting a model provider.",
        "tags": ["example"],
        "category": "Uncategorized",
    }

    def invoke(self, request: ModelRequest) -> ModelResponse:
        _ = request
        return ModelResponse(text="```json\n" + json.dumps(self.DEFAULT_RESPONSE) + "\n```")
