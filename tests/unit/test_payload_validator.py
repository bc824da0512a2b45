"""Unit tests for the payload validator."""

import json
import pytest

from tracker_ingest.exceptions import BadPayloadError
from tracker_ingest.service import PayloadValidator
from tracker_ingest.service.payload_validator import is_number, is_valid_lat_lng, parse_body


def _raw(body) -> bytes:
    return json.dumps(body).encode("utf-8")


class TestParseBody:

    def test_invalid_json(self):
        with pytest.raises(BadPayloadError):
            parse_body(b"{not json")

    @pytest.mark.parametrize("body", [b"[]", b"1", b'"text"', b"null"])
    def test_non_object_rejected(self, body):
        with pytest.raises(BadPayloadError):
            parse_body(body)

    def test_empty_body_is_empty_object(self):
        assert parse_body(b"") == {}


class TestCoordinates:

    @pytest.mark.parametrize("lat,lng", [(0, 0), (90, 180), (-90, -180), (6.9271, 79.8612)])
    def test_valid(self, lat, lng):
        assert is_valid_lat_lng(lat, lng)

    @pytest.mark.parametrize("lat,lng", [
        (91, 20),
        (10, -200),
        (-90.0001, 0),
        ("10", 20),
        (10, None),
        (True, 20),
        (float("nan"), 20),
        (10, float("inf")),
    ])
    def test_invalid(self, lat, lng):
        assert not is_valid_lat_lng(lat, lng)

    def test_booleans_are_not_numbers(self):
        assert not is_number(True)
        assert is_number(1)
        assert is_number(1.5)


class TestValidate:

    def test_minimal_ping(self, sample_ping):
        ping = PayloadValidator().validate(_raw(sample_ping))
        assert ping.vehicle_id == "V1"
        assert ping.lat == 10
        assert ping.lng == 20
        assert ping.sent_at == 1000
        assert ping.speed_kph is None

    def test_full_ping(self, full_ping):
        ping = PayloadValidator().validate(_raw(full_ping))
        assert ping.heading == 270
        assert ping.battery_pct == 77

    @pytest.mark.parametrize("vehicle_id", [None, "", 0, 42, ["V1"]])
    def test_bad_vehicle_id(self, sample_ping, vehicle_id):
        sample_ping["vehicleId"] = vehicle_id
        with pytest.raises(BadPayloadError) as exc_info:
            PayloadValidator().validate(_raw(sample_ping))
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Bad payload"

    def test_missing_vehicle_id(self, sample_ping):
        del sample_ping["vehicleId"]
        with pytest.raises(BadPayloadError):
            PayloadValidator().validate(_raw(sample_ping))

    @pytest.mark.parametrize("field,value", [("lat", 91), ("lng", -200)])
    def test_out_of_bounds_coordinates(self, sample_ping, field, value):
        sample_ping[field] = value
        with pytest.raises(BadPayloadError):
            PayloadValidator().validate(_raw(sample_ping))

    def test_missing_lng(self, sample_ping):
        del sample_ping["lng"]
        with pytest.raises(BadPayloadError):
            PayloadValidator().validate(_raw(sample_ping))

    def test_optional_fields_not_range_checked_by_default(self, sample_ping):
        sample_ping.update({"speedKph": -5, "heading": 720, "accuracyM": -1, "batteryPct": 150})
        ping = PayloadValidator().validate(_raw(sample_ping))
        assert ping.speed_kph == -5
        assert ping.heading == 720
        assert ping.battery_pct == 150

    def test_null_optional_field_treated_as_absent(self, sample_ping):
        sample_ping["speedKph"] = None
        ping = PayloadValidator().validate(_raw(sample_ping))
        assert "speedKph" not in ping.vehicle_fields()

    @pytest.mark.parametrize("value", ["12", True, {"v": 1}, [1]])
    def test_non_numeric_optional_field_kept_by_default(self, sample_ping, value):
        sample_ping["speedKph"] = value
        ping = PayloadValidator().validate(_raw(sample_ping))
        assert ping.speed_kph == value
        assert ping.vehicle_fields()["speedKph"] == value
        assert ping.history_fields()["speedKph"] == value

    @pytest.mark.parametrize("value", ["12", True, {"v": 1}, [1]])
    def test_non_numeric_optional_field_rejected_in_strict_mode(self, sample_ping, value):
        sample_ping["speedKph"] = value
        with pytest.raises(BadPayloadError):
            PayloadValidator(strict=True).validate(_raw(sample_ping))

    @pytest.mark.parametrize("raw", [
        b'{"vehicleId":"V1","lat":1,"lng":2,"heading":NaN}',
        b'{"vehicleId":"V1","lat":1,"lng":2,"heading":-Infinity}',
        b'{"vehicleId":"V1","lat":1,"lng":2,"speedKph":1e400}',
    ])
    def test_non_standard_numbers_are_invalid_json(self, raw):
        with pytest.raises(BadPayloadError):
            PayloadValidator().validate(raw)

    def test_nul_in_vehicle_id_rejected(self, sample_ping):
        sample_ping["vehicleId"] = "V1\u0000"
        with pytest.raises(BadPayloadError):
            PayloadValidator().validate(_raw(sample_ping))

    @pytest.mark.parametrize("value", ["fast\u0000", {"k\u0000": 1}, ["a", "b\u0000"]])
    def test_nul_in_optional_value_rejected(self, sample_ping, value):
        sample_ping["heading"] = value
        with pytest.raises(BadPayloadError):
            PayloadValidator().validate(_raw(sample_ping))

    @pytest.mark.parametrize("field,value", [
        ("speedKph", -1),
        ("heading", 361),
        ("accuracyM", -0.5),
        ("batteryPct", 101),
    ])
    def test_strict_mode_checks_optional_ranges(self, sample_ping, field, value):
        sample_ping[field] = value
        with pytest.raises(BadPayloadError):
            PayloadValidator(strict=True).validate(_raw(sample_ping))

    def test_strict_mode_accepts_in_range_values(self, full_ping):
        ping = PayloadValidator(strict=True).validate(_raw(full_ping))
        assert ping.accuracy_m == 8.0


class TestSentAt:

    @pytest.mark.parametrize("sent_at", ["1000", None, True, 0])
    def test_unusable_sent_at_falls_back_to_receipt_time(self, sample_ping, sent_at):
        sample_ping["sentAt"] = sent_at
        ping = PayloadValidator().validate(_raw(sample_ping))
        assert ping.sent_at is None

    def test_missing_sent_at(self, sample_ping):
        del sample_ping["sentAt"]
        assert PayloadValidator().validate(_raw(sample_ping)).sent_at is None

    def test_fractional_sent_at_kept(self, sample_ping):
        sample_ping["sentAt"] = 1000.5
        assert PayloadValidator().validate(_raw(sample_ping)).sent_at == 1000.5

    def test_unrepresentable_sent_at_rejected(self, sample_ping):
        sample_ping["sentAt"] = 1e20
        with pytest.raises(BadPayloadError):
            PayloadValidator().validate(_raw(sample_ping))
