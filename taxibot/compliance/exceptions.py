class ComplianceError(Exception):
    """Base exception for compliance validation errors."""


class ValidationParseError(ComplianceError):
    """Raised when the judgment output is not a usable compliance result."""
