"""Device authentication: API key lookup and optional body signature."""

import asyncpg
import base64
import hashlib
import hmac
import logging
from typing import Optional

from ..constants import API_NAME, SIGNATURE_HEADER, TRACKER_KEY_HEADER
from ..exceptions import (
    DeviceDisabledError,
    InvalidSignatureError,
    MissingCredentialError,
    StorageError,
    UnknownCredentialError,
)
from ..models.device import Device
from ..models.request import IngestRequest
from ..repository import DeviceRepository

logger = logging.getLogger(__name__)


def mask_key(api_key: str) -> str:
    """Mask a credential for logging, keeping the last four characters."""
    if not api_key:
        return "<none>"
    return f"***{api_key[-4:]}" if len(api_key) > 4 else "***"


def sign_body(secret: str, raw_body: bytes) -> str:
    """Base64-encoded HMAC-SHA256 of the raw request body.

    Args:
        secret: Device signing key
        raw_body: Exact request body bytes, as sent on the wire

    Returns:
        Signature string as expected in the X-Signature header
    """
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(secret: str, raw_body: bytes, signature: str) -> bool:
    expected = sign_body(secret, raw_body)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


class Authenticator:
    """Resolves the presented credential to an enabled device.

    Signature verification is only enforced when the device has a secret
    AND the request carries a signature. Devices without a secret, and
    requests without a signature, are authenticated by API key alone, so
    signature enforcement must not be assumed for every device.
    """

    def __init__(self, device_repo: DeviceRepository):
        self.device_repo = device_repo

    def extract_credential(self, request: IngestRequest) -> str:
        """Return the presented API key; raises before any registry access if missing."""
        api_key = request.header(TRACKER_KEY_HEADER)
        if not api_key:
            raise MissingCredentialError()
        return api_key

    async def authenticate(self, request: IngestRequest, api_key: str,
                           conn: asyncpg.Connection) -> Device:
        """Authenticate a request whose credential is already extracted.

        Args:
            request: Inbound request (signature header and raw body)
            api_key: Presented credential
            conn: Database connection used for the registry read

        Returns:
            The authenticated device

        Raises:
            UnknownCredentialError: No device uses this key
            DeviceDisabledError: Device exists but is disabled
            InvalidSignatureError: Signature supplied and does not match
            StorageError: Registry lookup failed
        """
        try:
            device = await self.device_repo.find_by_api_key(api_key, conn=conn)
        except Exception as e:
            raise StorageError(detail=f"device lookup failed: {e}") from e

        if device is None:
            raise UnknownCredentialError(detail=f"key {mask_key(api_key)}")

        if not device.is_enabled:
            raise DeviceDisabledError(detail=f"key {mask_key(api_key)}")

        self._check_signature(device, request.header(SIGNATURE_HEADER), request.raw_body)
        return device

    def _check_signature(self, device: Device, signature: Optional[str], raw_body: bytes) -> None:
        if not device.requires_signature_check or not signature:
            logger.debug(
                f"{API_NAME} Signature check skipped "
                f"(device has secret: {device.requires_signature_check}, signature supplied: {bool(signature)})"
            )
            return

        if not verify_signature(device.secret, raw_body, signature):
            raise InvalidSignatureError(detail=f"key {mask_key(device.api_key)}")
