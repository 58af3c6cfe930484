class StorageError(Exception):
    """Raised when a persistence read or write fails."""
