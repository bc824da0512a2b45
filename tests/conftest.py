"""Pytest configuration and shared fixtures."""

import json
import pytest
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

from tracker_ingest.models import Device, IngestRequest
from tracker_ingest.repository import DeviceRepository, PositionRepository, VehicleRepository
from tracker_ingest.service import (
    Authenticator,
    IngestionService,
    PayloadValidator,
    RequestGate,
    StateWriter,
    sign_body,
)

API_KEY = "trk_live_0123456789abcdef"
SECRET = "s3cr3t-signing-key"
RECEIVED_MS = 1700000000000


@pytest.fixture
def sample_ping() -> Dict[str, Any]:
    """Ping matching the documented wire format."""
    return {
        "vehicleId": "V1",
        "lat": 10,
        "lng": 20,
        "sentAt": 1000,
    }


@pytest.fixture
def full_ping() -> Dict[str, Any]:
    """Ping carrying every optional telemetry field."""
    return {
        "vehicleId": "BUS-042",
        "lat": 6.9271,
        "lng": 79.8612,
        "speedKph": 42.5,
        "heading": 270,
        "accuracyM": 8.0,
        "batteryPct": 77,
        "sentAt": 1717171717171,
    }


@pytest.fixture
def device() -> Device:
    """Enabled device without a signing secret."""
    return Device(api_key=API_KEY, secret=None, enabled=True)


@pytest.fixture
def signed_device() -> Device:
    """Enabled device with a signing secret."""
    return Device(api_key=API_KEY, secret=SECRET, enabled=True)


@pytest.fixture
def disabled_device() -> Device:
    return Device(api_key=API_KEY, secret=None, enabled=False)


@pytest.fixture
def make_request():
    """Build an IngestRequest from a body dict (or raw bytes)."""
    def _make(body: Any = None, method: str = "POST", api_key: str = API_KEY,
              signature: str = None, headers: Dict[str, str] = None) -> IngestRequest:
        if isinstance(body, (bytes, bytearray)):
            raw = bytes(body)
        else:
            raw = json.dumps(body if body is not None else {}).encode("utf-8")
        all_headers = {"Content-Type": "application/json"}
        if api_key is not None:
            all_headers["X-Tracker-Key"] = api_key
        if signature is not None:
            all_headers["X-Signature"] = signature
        if headers:
            all_headers.update(headers)
        return IngestRequest(method=method, headers=all_headers, raw_body=raw, request_id="req-test")
    return _make


@pytest.fixture
def signature_for():
    """Compute the X-Signature header for a request body."""
    def _sign(request: IngestRequest, secret: str = SECRET) -> str:
        return sign_body(secret, request.raw_body)
    return _sign


@pytest.fixture
def mock_connection():
    """Mock asyncpg connection with a working transaction context manager."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock(return_value=None)
    conn.execute = AsyncMock()
    conn.close = AsyncMock()
    conn.transaction = MagicMock()
    conn.transaction.return_value.__aenter__ = AsyncMock()
    conn.transaction.return_value.__aexit__ = AsyncMock(return_value=None)
    return conn


@pytest.fixture
def mock_device_repo(device):
    """Mock DeviceRepository returning the enabled, unsigned device."""
    repo = MagicMock(spec=DeviceRepository)
    repo.find_by_api_key = AsyncMock(return_value=device)
    return repo


@pytest.fixture
def mock_vehicle_repo():
    repo = MagicMock(spec=VehicleRepository)
    repo.merge_state = AsyncMock()
    return repo


@pytest.fixture
def mock_position_repo():
    repo = MagicMock(spec=PositionRepository)
    repo.upsert = AsyncMock()
    return repo


@pytest.fixture
def connection_factory(mock_connection):
    factory = AsyncMock(return_value=mock_connection)
    return factory


@pytest.fixture
def service(mock_device_repo, mock_vehicle_repo, mock_position_repo, connection_factory):
    """IngestionService with mocked repositories and connection."""
    return IngestionService(
        gate=RequestGate(),
        authenticator=Authenticator(mock_device_repo),
        validator=PayloadValidator(),
        writer=StateWriter(mock_vehicle_repo, mock_position_repo, clock=lambda: RECEIVED_MS),
        connection_factory=connection_factory,
        api_name="[test-api]",
    )
