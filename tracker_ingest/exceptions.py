"""Classified failures raised by the ingestion pipeline.

Every stage short-circuits by raising a subclass of ``IngestError``. The
outermost boundary converts it into a JSON error response using
``status_code`` and ``message``; ``message`` is always safe to return to the
caller.
"""

from typing import Optional

from .constants import (
    ERROR_BAD_PAYLOAD,
    ERROR_DEVICE_DISABLED,
    ERROR_INTERNAL,
    ERROR_INVALID_SIGNATURE,
    ERROR_METHOD_NOT_ALLOWED,
    ERROR_MISSING_KEY,
    ERROR_PAYLOAD_TOO_LARGE,
    ERROR_UNKNOWN_KEY,
)


class IngestError(Exception):
    """Base class for failures that map to an HTTP error response."""

    status_code = 500
    default_message = ERROR_INTERNAL

    def __init__(self, message: str = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        # detail is for server-side logs only, never returned to the caller
        self.detail = detail
        super().__init__(self.message)


class TransportError(IngestError):
    """Request rejected before any business logic ran."""


class MethodNotAllowedError(TransportError):
    status_code = 405
    default_message = ERROR_METHOD_NOT_ALLOWED


class PayloadTooLargeError(TransportError):
    status_code = 413
    default_message = ERROR_PAYLOAD_TOO_LARGE

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(detail=f"body size {size} exceeds limit {limit}")


class AuthError(IngestError):
    """Device could not be authenticated."""

    status_code = 401


class MissingCredentialError(AuthError):
    default_message = ERROR_MISSING_KEY


class UnknownCredentialError(AuthError):
    default_message = ERROR_UNKNOWN_KEY


class InvalidSignatureError(AuthError):
    default_message = ERROR_INVALID_SIGNATURE


class DeviceDisabledError(AuthError):
    status_code = 403
    default_message = ERROR_DEVICE_DISABLED


class PayloadValidationError(IngestError):
    """Ping body is structurally or semantically invalid."""

    status_code = 400
    default_message = ERROR_BAD_PAYLOAD


class BadPayloadError(PayloadValidationError):
    pass


class StorageError(IngestError):
    """Device lookup or transactional write failed in the backing store."""

    status_code = 500
    default_message = ERROR_INTERNAL
