"""
Domain errors

ValidationError and NotFoundError are raised synchronously at the mutation
boundary. RemoteStoreError and TransientNetworkError come from remote store
calls and are caught where writes are forwarded.
"""

from typing import Optional


class QRMenuError(Exception):
    """Base class for all qrmenu errors"""


class ValidationError(QRMenuError):
    """Local input validation failure, scoped to a field when known"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"detail": self.message, "field": self.field}


class NotFoundError(QRMenuError):
    """Tenant or related entity does not exist"""


class RemoteStoreError(QRMenuError):
    """Remote store rejected a request"""


class TransientNetworkError(RemoteStoreError):
    """Remote store unreachable, timed out or temporarily failing"""
