# orders/errors.py

class SearchError(Exception):
    """Raised by a search backend when a search or lookup cannot be answered."""
    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status
