from typing import ClassVar

from app.config.settings import Settings
from app.providers.base import BaseModelClient
from app.providers.example_client_adapter import ExampleClientAdapter
from app.providers.gemini_client_adapter import GeminiClientAdapter
from app.providers.openai_client_adapter import OpenAIClientAdapter


class ModelClientFactory:
    """Creates the model client for a provider name chosen at case level."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def create(self, provider: str | None = None) -> BaseModelClient:
        """Create a client for `provider`, or the configured default when empty."""
        name = (provider or self._settings.analysis_default_provider).strip().lower()
        if name == "example":
            return ExampleClientAdapter()
        if name == "gemini":
            return GeminiClientAdapter(
                api_key=self._settings.gemini_api_key,
                model=self._settings.gemini_model_name,
                timeout_seconds=self._settings.gemini_timeout_seconds,
                base_url=self._settings.gemini_base_url,
            )
        return OpenAIClientAdapter(
            api_key=self._resolve_api_key(name),
            model=self._resolve_model_name(name),
            timeout_seconds=self._resolve_timeout_seconds(name),
            base_url=self._resolve_base_url(name),
        )

    def _resolve_base_url(self, provider: str) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = self._settings.openai_compatible_base_url.strip()
            if not url:
                raise ValueError(
                    "openai_compatible_base_url is required for provider=openai_compatible"
                )
            return url
        default_base_url = self.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "gemini",
            "openai",
            "openai_compatible",
            *sorted(self.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown model provider '{provider}'. Choose from: {supported}")

    def _resolve_api_key(self, provider: str) -> str:
        key_map = {
            "openai": self._settings.openai_api_key,
            "openai_compatible": self._settings.openai_compatible_api_key,
            "openrouter": self._settings.openrouter_api_key,
            "groq": self._settings.groq_api_key,
            "together": self._settings.together_api_key,
            "deepseek": self._settings.deepseek_api_key,
            "ollama": self._settings.ollama_api_key,
        }
        return key_map.get(provider, "") or ""

    def _resolve_model_name(self, provider: str) -> str:
        key_map = {
            "openai": self._settings.openai_model_name,
            "openai_compatible": self._settings.openai_compatible_model_name,
            "openrouter": self._settings.openrouter_model_name,
            "groq": self._settings.groq_model_name,
            "together": self._settings.together_model_name,
            "deepseek": self._settings.deepseek_model_name,
            "ollama": self._settings.ollama_model_name,
        }
        return key_map.get(provider, "") or self._settings.openai_model_name

    def _resolve_timeout_seconds(self, provider: str) -> int:
        if provider == "openai_compatible":
            return self._settings.openai_compatible_timeout_seconds
        return self._settings.openai_timeout_seconds
