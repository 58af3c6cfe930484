class RetrievalError(Exception):
    """Raised when the search or embedding service fails."""
