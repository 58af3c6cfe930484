class IngestionError(Exception):
    """Base exception for failures before a document record exists."""


class TextExtractionError(IngestionError):
    """Raised when text cannot be extracted from the uploaded bytes."""


class UnsupportedMimeTypeError(IngestionError):
    """Raised when no extractor handles the document's MIME type."""
