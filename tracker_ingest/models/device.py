"""Device registry record."""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field


class Device(BaseModel):
    """A registered tracking unit, provisioned outside this service."""

    api_key: str = Field(..., alias="apiKey")
    secret: Optional[str] = None
    enabled: Optional[bool] = None

    class Config:
        """Pydantic config."""
        populate_by_name = True

    @property
    def is_enabled(self) -> bool:
        # A missing flag counts as disabled
        return bool(self.enabled)

    @property
    def requires_signature_check(self) -> bool:
        return bool(self.secret)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Device":
        """Build a Device from an asyncpg record (or any mapping)."""
        return cls(
            api_key=record["api_key"],
            secret=record["secret"],
            enabled=record["enabled"],
        )
