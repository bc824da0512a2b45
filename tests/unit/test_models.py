"""Unit tests for ingestion models."""

import pytest
from pydantic import ValidationError

from tracker_ingest.models import Device, IngestRequest, IngestResponse, Ping


class TestPing:
    """Tests for Ping model."""

    def test_accepts_wire_aliases(self):
        ping = Ping(vehicleId="V1", lat=10, lng=20, speedKph=12.5, sentAt=1000)
        assert ping.vehicle_id == "V1"
        assert ping.speed_kph == 12.5
        assert ping.sent_at == 1000

    def test_accepts_snake_case_names(self):
        ping = Ping(vehicle_id="V1", lat=10, lng=20, battery_pct=50)
        assert ping.battery_pct == 50

    def test_integers_stay_integers(self):
        ping = Ping(vehicleId="V1", lat=10, lng=20)
        assert ping.lat == 10
        assert isinstance(ping.lat, int)

    def test_vehicle_fields_omit_absent_optionals(self):
        ping = Ping(vehicleId="V1", lat=10, lng=20)
        assert ping.vehicle_fields() == {"lat": 10, "lng": 20}

    def test_vehicle_fields_include_battery(self, full_ping):
        fields = Ping(**full_ping).vehicle_fields()
        assert fields == {
            "lat": 6.9271,
            "lng": 79.8612,
            "speedKph": 42.5,
            "heading": 270,
            "accuracyM": 8.0,
            "batteryPct": 77,
        }

    def test_history_fields_never_include_battery(self, full_ping):
        fields = Ping(**full_ping).history_fields()
        assert "batteryPct" not in fields
        assert "sentAt" not in fields
        assert "vehicleId" not in fields
        assert fields["speedKph"] == 42.5

    def test_missing_vehicle_id_rejected(self):
        with pytest.raises(ValidationError):
            Ping(lat=10, lng=20)


class TestDevice:
    """Tests for Device model."""

    def test_from_record(self):
        device = Device.from_record({"api_key": "k", "secret": "s", "enabled": True})
        assert device.api_key == "k"
        assert device.is_enabled
        assert device.requires_signature_check

    def test_missing_enabled_flag_is_disabled(self):
        device = Device.from_record({"api_key": "k", "secret": None, "enabled": None})
        assert not device.is_enabled

    def test_empty_secret_skips_signature(self):
        device = Device(apiKey="k", secret="", enabled=True)
        assert not device.requires_signature_check


class TestIngestRequest:
    """Tests for IngestRequest model."""

    def test_method_uppercased(self):
        assert IngestRequest(method="post").method == "POST"

    def test_header_lookup_is_case_insensitive(self):
        request = IngestRequest(method="POST", headers={"X-Tracker-Key": "abc"})
        assert request.header("x-tracker-key") == "abc"
        assert request.header("X-TRACKER-KEY") == "abc"

    def test_missing_header_is_none(self):
        assert IngestRequest(method="POST").header("X-Signature") is None


class TestIngestResponse:
    def test_ok(self):
        response = IngestResponse.ok()
        assert response.status_code == 200
        assert response.body == {"status": "ok"}

    def test_error_defaults_to_internal(self):
        response = IngestResponse.error(500)
        assert response.body == {"error": "Internal error"}
