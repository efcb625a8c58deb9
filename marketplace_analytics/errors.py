"""
Error Taxonomy

Client errors are raised at the boundary before any fetch is issued and carry
the HTTP status the serving layer responds with. Data store errors wrap the
driver exception; dashboard assemblers absorb them per section.
"""

from typing import Any, Dict, Optional


class AnalyticsError(Exception):
    """Base class for all analytics engine errors"""


class ClientError(AnalyticsError):
    """Invalid request input, never retried"""

    status_code: int = 400
    error_type: str = "client_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_type, "message": self.message, "details": self.details}


class InvalidFilterError(ClientError):
    """Unsupported period, status filter or count entity"""

    status_code = 400
    error_type = "invalid_filter"


class ScopeAccessError(ClientError):
    """Requested store is not owned by the seller"""

    status_code = 403
    error_type = "scope_access_denied"


class NotFoundError(ClientError):
    status_code = 404
    error_type = "not_found"


class DataStoreError(AnalyticsError):
    """A data store query failed"""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        message = f"Data store operation '{operation}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
