from abc import ABC, abstractmethod


class BaseLLMClient(ABC):
    """Contract for provider-specific judgment-service clients."""

    @abstractmethod
    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None = None,
    ) -> str:
        """Return provider response as plain text."""
