"""Transport-level checks run before any business logic."""

import logging
from typing import Optional

from ..constants import API_NAME, CONTENT_LENGTH_HEADER, MAX_BODY_BYTES
from ..exceptions import MethodNotAllowedError, PayloadTooLargeError
from ..models.request import IngestRequest

logger = logging.getLogger(__name__)


def _declared_length(value: Optional[str]) -> Optional[int]:
    # Plain ASCII digits only; signs, underscores and other digit forms are not a length
    if value is None:
        return None
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def measure_body_size(request: IngestRequest) -> int:
    """Body size in bytes: declared Content-Length when parseable, else the raw body length."""
    declared = _declared_length(request.header(CONTENT_LENGTH_HEADER))
    if declared is not None:
        return declared
    return len(request.raw_body)


class RequestGate:
    """Rejects wrong methods and oversized bodies."""

    def __init__(self, max_body_bytes: int = MAX_BODY_BYTES):
        self.max_body_bytes = max_body_bytes

    def check(self, request: IngestRequest) -> None:
        self.check_method(request)
        self.check_body_size(request)

    def check_method(self, request: IngestRequest) -> None:
        if request.method != "POST":
            raise MethodNotAllowedError(detail=f"method {request.method or '<none>'}")

    def check_body_size(self, request: IngestRequest) -> None:
        """Reject bodies larger than ``max_body_bytes``.

        Fails open on measurement: if the size cannot be determined the
        request is let through and later stages decide. Only a measured
        size above the limit rejects the request.
        """
        try:
            size = measure_body_size(request)
        except Exception as e:
            logger.warning(f"{API_NAME} Could not measure body size, skipping size check: {e}")
            return

        if size > self.max_body_bytes:
            raise PayloadTooLargeError(size, self.max_body_bytes)
