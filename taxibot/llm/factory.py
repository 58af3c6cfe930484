from typing import ClassVar

from taxibot.config.settings import Settings
from taxibot.llm.client_base import BaseLLMClient
from taxibot.llm.example_client_adapter import ExampleClientAdapter
from taxibot.llm.openai_client_adapter import OpenAIClientAdapter


class LLMClientFactory:
    """Creates the configured judgment-service client."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseLLMClient:
        """Create a configured client from application settings."""
        provider = settings.llm_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.llm_api_key,
            timeout_seconds=settings.llm_timeout_seconds,
            base_url=cls.resolve_base_url(provider, settings),
        )

    @classmethod
    def resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.llm_base_url or "").strip()
            if not url:
                raise ValueError(
                    "llm_base_url is required for llm_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return (settings.llm_base_url or "").strip() or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {supported}")

    @classmethod
    def resolve_model_name(cls, settings: Settings) -> str:
        if settings.llm_provider.lower() == "example":
            return "example"
        return settings.llm_model_name

    @classmethod
    def resolve_temperature(cls, settings: Settings) -> float:
        return max(0.0, min(0.2, settings.llm_temperature))

    @classmethod
    def resolve_embeddings_base_url(cls, settings: Settings) -> str | None:
        provider = settings.llm_provider.lower()
        if provider == "example":
            return None
        return cls.resolve_base_url(provider, settings)
