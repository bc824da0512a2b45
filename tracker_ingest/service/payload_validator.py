"""Structural and semantic validation of ping bodies."""

import json
import logging
import math
from typing import Any, Dict, Optional

from ..constants import (
    ACCURACY_M_MIN,
    BATTERY_PCT_MAX,
    BATTERY_PCT_MIN,
    HEADING_MAX,
    HEADING_MIN,
    LAT_MAX,
    LAT_MIN,
    LNG_MAX,
    LNG_MIN,
    SPEED_KPH_MIN,
)
from ..exceptions import BadPayloadError
from ..models.ping import Ping

logger = logging.getLogger(__name__)

# Event timestamps must fit a datetime (years 1..9999)
SENT_AT_MIN_MS = -62135596800000
SENT_AT_MAX_MS = 253402300799999

# (alias, lower bound, upper bound) for strict mode
_OPTIONAL_BOUNDS = (
    ("speedKph", SPEED_KPH_MIN, None),
    ("heading", HEADING_MIN, HEADING_MAX),
    ("accuracyM", ACCURACY_M_MIN, None),
    ("batteryPct", BATTERY_PCT_MIN, BATTERY_PCT_MAX),
)


def is_number(value: Any) -> bool:
    """True for JSON numbers; booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    return is_number(value) and math.isfinite(value)


def is_valid_lat_lng(lat: Any, lng: Any) -> bool:
    return (
        is_finite_number(lat) and is_finite_number(lng)
        and LAT_MIN <= lat <= LAT_MAX
        and LNG_MIN <= lng <= LNG_MAX
    )


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} overflows")
    return value


def contains_nul(value: Any) -> bool:
    """True if any string in a JSON value holds a NUL character (PostgreSQL rejects those)."""
    if isinstance(value, str):
        return "\x00" in value
    if isinstance(value, dict):
        return any(contains_nul(k) or contains_nul(v) for k, v in value.items())
    if isinstance(value, list):
        return any(contains_nul(v) for v in value)
    return False


def parse_body(raw_body: bytes) -> Dict[str, Any]:
    """Parse the raw body as a JSON object.

    Only standard JSON is accepted: ``NaN``, ``Infinity`` and numbers that
    overflow a float are parse errors.
    """
    try:
        body = json.loads(
            raw_body or b"{}",
            parse_constant=_reject_constant,
            parse_float=_finite_float,
        )
    except (ValueError, UnicodeDecodeError) as e:
        raise BadPayloadError(detail=f"invalid JSON: {e}") from e
    if not isinstance(body, dict):
        raise BadPayloadError(detail=f"body is a JSON {type(body).__name__}, expected object")
    return body


def _event_time(sent_at: Any) -> Optional[float]:
    # Anything other than a usable, non-zero epoch-ms number falls back to receipt time
    if not is_finite_number(sent_at) or not sent_at:
        return None
    if not SENT_AT_MIN_MS <= sent_at <= SENT_AT_MAX_MS:
        raise BadPayloadError(detail=f"sentAt {sent_at} out of range")
    return sent_at


class PayloadValidator:
    """Validates a ping body and builds a ``Ping``.

    Only ``vehicleId`` and the coordinates are checked by default; optional
    telemetry is passed through as sent. With ``strict`` enabled, optional
    fields must be finite numbers within their bounds.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def validate(self, raw_body: bytes) -> Ping:
        return self.validate_fields(parse_body(raw_body))

    def validate_fields(self, body: Dict[str, Any]) -> Ping:
        vehicle_id = body.get("vehicleId")
        if not vehicle_id or not isinstance(vehicle_id, str):
            raise BadPayloadError(detail="vehicleId missing or not a non-empty string")
        if contains_nul(vehicle_id):
            raise BadPayloadError(detail="vehicleId contains a NUL character")

        lat, lng = body.get("lat"), body.get("lng")
        if not is_valid_lat_lng(lat, lng):
            raise BadPayloadError(detail=f"invalid coordinates lat={lat!r} lng={lng!r}")

        optional = {}
        for alias, low, high in _OPTIONAL_BOUNDS:
            value = body.get(alias)
            if value is None:
                continue
            if self.strict:
                if not is_finite_number(value):
                    raise BadPayloadError(detail=f"{alias} is not a finite number")
                if not _within(value, low, high):
                    raise BadPayloadError(detail=f"{alias}={value} out of range")
            elif contains_nul(value):
                raise BadPayloadError(detail=f"{alias} contains a NUL character")
            optional[alias] = value

        return Ping(
            vehicleId=vehicle_id,
            lat=lat,
            lng=lng,
            sentAt=_event_time(body.get("sentAt")),
            **optional,
        )


def _within(value: float, low: Optional[float], high: Optional[float]) -> bool:
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True
