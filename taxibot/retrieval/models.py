from dataclasses import dataclass


@dataclass(frozen=True)
class SearchHit:
    """A raw search result before chunking."""

    source_uri: str
    text: str


@dataclass(frozen=True)
class TaxRuleExcerpt:
    """A ranked legal-text excerpt relevant to a document."""

    source_uri: str
    text: str
    relevance_score: float

    def to_dict(self) -> dict[str, object]:
        return {
            "sourceUri": self.source_uri,
            "text": self.text,
            "relevanceScore": self.relevance_score,
        }
