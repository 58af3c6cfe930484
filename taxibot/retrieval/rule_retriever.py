"""Retrieval of legal-text excerpts relevant to a fiscal document.

Search results are chunked, embedded together with the query and ranked by
cosine similarity. Nothing is cached: every call searches and embeds again.
"""

from taxibot.logging.logger import Log
from taxibot.retrieval.chunking import CHUNK_OVERLAP, CHUNK_SIZE, chunk_text
from taxibot.retrieval.embeddings import BaseEmbeddingsClient
from taxibot.retrieval.models import TaxRuleExcerpt
from taxibot.retrieval.search_client import BaseSearchClient
from taxibot.retrieval.similarity import cosine_scores, top_k

TRUSTED_SITES = ("site:.gov.br", "site:legisweb.com.br", "site:confaz.fazenda.gov.br")
DEFAULT_TOP_K = 5


def build_scoped_query(
    query: str,
    document_type: str = "NFE",
    state: str | None = None,
    sector: str | None = None,
) -> str:
    parts = [query, "legislação tributária brasil", document_type]
    if state:
        parts.append(state)
    if sector:
        parts.append(f"setor {sector}")
    parts.append(" OR ".join(TRUSTED_SITES))
    return " ".join(parts)


class RuleRetriever:
    """Ranks search-result chunks against a query by embedding similarity."""

    def __init__(
        self,
        *,
        search_client: BaseSearchClient,
        embeddings_client: BaseEmbeddingsClient,
        top_k: int = DEFAULT_TOP_K,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
    ) -> None:
        self._search = search_client
        self._embeddings = embeddings_client
        self._top_k = top_k
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap

    async def retrieve(
        self,
        query: str,
        document_type: str = "NFE",
        state: str | None = None,
        sector: str | None = None,
    ) -> list[TaxRuleExcerpt]:
        """Return up to top_k excerpts, best first.

        Raises:
            RetrievalError: if the search or the embedding service fails.
        """
        scoped_query = build_scoped_query(query, document_type, state, sector)
        hits = await self._search.search(scoped_query)

        sources: list[str] = []
        chunks: list[str] = []
        for hit in hits:
            for chunk in chunk_text(hit.text, self._chunk_size, self._chunk_overlap):
                sources.append(hit.source_uri)
                chunks.append(chunk)
        if not chunks:
            Log.info(f"Tax rule search returned no content for '{query}'")
            return []

        vectors = await self._embeddings.embed([query, *chunks])
        scores = cosine_scores(vectors[0], vectors[1:])
        excerpts = [
            TaxRuleExcerpt(
                source_uri=sources[index],
                text=chunks[index],
                relevance_score=round(scores[index], 6),
            )
            for index in top_k(scores, self._top_k)
        ]
        Log.info(
            f"Tax rule search completed for '{query}': "
            f"{len(hits)} hits, {len(chunks)} chunks, {len(excerpts)} excerpts"
        )
        return excerpts
