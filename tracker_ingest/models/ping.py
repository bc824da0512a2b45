"""Ping (telemetry report) model."""

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

Number = Union[int, float]

# Fields never written to position history
_VEHICLE_ONLY_FIELDS = {"battery_pct"}


class Ping(BaseModel):
    """One validated telemetry report.

    Optional telemetry fields use ``None`` for "not supplied"; they are
    dropped, not stored as null, when the ping is turned into documents.
    Outside strict validation they carry whatever JSON value the device sent.
    """

    vehicle_id: str = Field(..., alias="vehicleId")
    lat: Number
    lng: Number
    speed_kph: Optional[Any] = Field(None, alias="speedKph")
    heading: Optional[Any] = None
    accuracy_m: Optional[Any] = Field(None, alias="accuracyM")
    battery_pct: Optional[Any] = Field(None, alias="batteryPct")
    sent_at: Optional[Number] = Field(None, alias="sentAt")

    class Config:
        """Pydantic config."""
        populate_by_name = True

    def vehicle_fields(self) -> Dict[str, Any]:
        """Fields merged into the vehicle's current-state document."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={"vehicle_id", "sent_at"},
        )

    def history_fields(self) -> Dict[str, Any]:
        """Fields stored in the position history document."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude={"vehicle_id", "sent_at", *_VEHICLE_ONLY_FIELDS},
        )
