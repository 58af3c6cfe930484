import re
from abc import ABC, abstractmethod
from typing import Any

import httpx

from taxibot.retrieval.exceptions import RetrievalError
from taxibot.retrieval.models import SearchHit

_HTML_TAG = re.compile(r"<[^>]+>")


class BaseSearchClient(ABC):
    """Contract for web search providers."""

    @abstractmethod
    async def search(self, query: str) -> list[SearchHit]:
        """Return hits in provider ranking order.

        Raises:
            RetrievalError: on network or provider failure.
        """


class BraveSearchClient(BaseSearchClient):
    """Web search through the Brave Search API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        result_count: int = 10,
        timeout_seconds: int = 15,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._result_count = result_count
        self._timeout_seconds = timeout_seconds
        self._http = http_client

    async def search(self, query: str) -> list[SearchHit]:
        try:
            if self._http is not None:
                response = await self._get(self._http, query)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
                    response = await self._get(client, query)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise RetrievalError(f"Search request failed: {exc}") from exc
        except ValueError as exc:
            raise RetrievalError(f"Search returned invalid JSON: {exc}") from exc
        return self._hits(payload)

    async def _get(self, client: httpx.AsyncClient, query: str) -> httpx.Response:
        return await client.get(
            self._base_url,
            params={"q": query, "count": self._result_count},
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": self._api_key,
            },
        )

    @staticmethod
    def _hits(payload: Any) -> list[SearchHit]:
        if not isinstance(payload, dict):
            raise RetrievalError("Search response must be a JSON object")
        web = payload.get("web") or {}
        if not isinstance(web, dict):
            raise RetrievalError("Search response 'web' must be a JSON object")
        results = web.get("results") or []
        if not isinstance(results, list):
            raise RetrievalError("Search response 'web.results' must be a list")
        hits: list[SearchHit] = []
        for result in results:
            if not isinstance(result, dict):
                continue
            url = result.get("url")
            snippets = result.get("extra_snippets") or []
            if not isinstance(snippets, list):
                raise RetrievalError("Search result 'extra_snippets' must be a list")
            parts = [result.get("title"), result.get("description"), *snippets]
            text = "\n".join(
                _HTML_TAG.sub("", part) for part in parts if isinstance(part, str) and part.strip()
            )
            if isinstance(url, str) and url and text:
                hits.append(SearchHit(source_uri=url, text=text))
        return hits
