"""
Exceptions raised while searching inside a document.

The HTTP layer maps these to responses; the CLI prints them.
"""
from typing import Any, Dict, Optional


class SearchException(Exception):
    """
    Base class for all search errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code
        details: Extra context (record id, payload key, ...)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class RecordNotFound(SearchException):
    """Raised when the searched record does not exist in storage."""

    def __init__(self, dataset_id: str, local_id: str, message: Optional[str] = None):
        self.dataset_id = dataset_id
        self.local_id = local_id
        super().__init__(
            message or f"Record /{dataset_id}/{local_id} does not exist",
            "RECORD_NOT_FOUND",
            {'dataset_id': dataset_id, 'local_id': local_id}
        )


class MalformedEnginePayload(SearchException):
    """Raised when the search engine returns highlight data of an unexpected shape."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {'field': field} if field else {}
        super().__init__(message, "MALFORMED_ENGINE_PAYLOAD", details)


class SearchEngineUnavailable(SearchException):
    """Raised when the search engine cannot be reached or returns an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        details = {'status_code': status_code} if status_code is not None else {}
        super().__init__(message, "SEARCH_ENGINE_UNAVAILABLE", details)


class InvalidSearchRequest(SearchException):
    """Raised when search parameters are invalid (empty query, bad page size, ...)."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {'field': field} if field else {}
        super().__init__(message, "INVALID_SEARCH_REQUEST", details)
