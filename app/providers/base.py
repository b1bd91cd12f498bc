from abc import ABC, abstractmethod

from app.providers.models import ModelRequest, ModelResponse


class BaseModelClient(ABC):
    """Contract for provider-specific generative model clients."""

    name: str = "base"

    @abstractmethod
    def invoke(self, request: ModelRequest) -> ModelResponse:
        """Send one prompt (with optional inline parts) to the provider.

        Args:
            request: Prompt text, inline binary parts and sampling temperature.

        Returns:
            ModelResponse with the raw text and any safety block reason.
            A blocked response is returned, not raised.

        Raises:
            RateLimitedError: when the provider throttles the request.
            ModelNetworkError: on connection/timeout/API failures.
            ModelResponseError: when the response carries no usable content.
        """

    def close(self) -> None:
        """Release connections held by the client. Safe to call more than once."""
