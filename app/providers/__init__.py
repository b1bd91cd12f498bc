from app.providers.base import BaseModelClient
from app.providers.factory import ModelClientFactory
from app.providers.models import InlinePart, ModelRequest, ModelResponse

__all__ = [
    "BaseModelClient",
    "InlinePart",
    "ModelClientFactory",
    "ModelRequest",
    "ModelResponse",
]
