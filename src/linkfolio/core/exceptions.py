"""Domain exceptions shared across LinkFolio components."""

from typing import Optional


class StorageError(Exception):
    """A read or write against the storage collaborator failed."""


class AggregationFailure(Exception):
    """Building an analytics report failed; no partial result is available."""

    def __init__(self, message: str, user_id: Optional[str] = None):
        super().__init__(message)
        self.user_id = user_id


class Unauthenticated(Exception):
    """No valid caller identity was supplied with the request."""

    def __init__(self, reason: str = "Unauthorized"):
        super().__init__(reason)
        self.reason = reason
