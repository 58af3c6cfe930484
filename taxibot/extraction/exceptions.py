class ExtractionError(Exception):
    """Base exception for document structuring errors."""


class StructuringParseError(ExtractionError):
    """Raised when the structuring service output is not a usable document record."""
