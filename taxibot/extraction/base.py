from abc import ABC, abstractmethod

from taxibot.extraction.models import DocumentRecord


class BaseDataExtractor(ABC):
    """Contract for document structuring adapters."""

    @abstractmethod
    async def extract(self, text: str) -> DocumentRecord:
        """Turn extracted document text into a DocumentRecord.

        Never raises for bad upstream output: implementations return
        DocumentRecord.default() when the text cannot be structured.
        """
