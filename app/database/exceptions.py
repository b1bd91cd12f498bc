class RecordNotFoundError(Exception):
    """Raised when an UPDATE targets a row that does not exist."""
