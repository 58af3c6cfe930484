from abc import ABC, abstractmethod


class BaseTextExtractor(ABC):
    """Contract for all text extraction adapters."""

    @abstractmethod
    def extract(self, raw_bytes: bytes) -> str:
        """Extract plain text from raw document bytes.

        Args:
            raw_bytes: Uploaded file content.

        Returns:
            Extracted text as a single normalized string.

        Raises:
            TextExtractionError: if extraction fails for any reason.
        """
