from abc import ABC, abstractmethod

import httpx
import openai

from taxibot.retrieval.exceptions import RetrievalError


class BaseEmbeddingsClient(ABC):
    """Contract for text embedding providers."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per input text, in input order.

        Raises:
            RetrievalError: on network or provider failure.
        """


class OpenAIEmbeddingsAdapter(BaseEmbeddingsClient):
    """Embeddings through the OpenAI-compatible embeddings API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )
        self._model = model

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            response = await self._client.embeddings.create(model=self._model, input=texts)
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise RetrievalError(f"Embeddings network error: {exc}") from exc
        except openai.APIError as exc:
            raise RetrievalError(f"Embeddings API error: {exc}") from exc
        vectors = [item.embedding for item in sorted(response.data, key=lambda item: item.index)]
        if len(vectors) != len(texts):
            raise RetrievalError(
                f"Embeddings returned {len(vectors)} vectors for {len(texts)} inputs"
            )
        return vectors
