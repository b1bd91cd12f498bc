class ModelClientError(Exception):
    """Raised when a generative model call fails."""


class ModelNetworkError(ModelClientError):
    """Raised when the provider call fails due to network/infrastructure issues."""


class ModelResponseError(ModelClientError):
    """Raised when the provider answers with an unusable payload."""


class RateLimitedError(ModelClientError):
    """Raised when the provider throttles the caller (HTTP 429 or quota exhausted)."""

    status_code = 429
