"""Transport-neutral request/response models.

Both entry points (API Gateway Lambda and FastAPI) translate their native
request into an ``IngestRequest`` and render the ``IngestResponse`` back.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from ..constants import ERROR_INTERNAL


class IngestRequest(BaseModel):
    """Inbound HTTP request as seen by the pipeline."""

    method: str
    headers: Dict[str, str] = Field(default_factory=dict)
    raw_body: bytes = b""
    request_id: Optional[str] = None

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> str:
        return str(v or "").upper()

    @field_validator("headers", mode="before")
    @classmethod
    def normalize_headers(cls, v: Any) -> Dict[str, str]:
        """Lowercase header names so lookups are case-insensitive."""
        if not v:
            return {}
        return {str(k).lower(): str(val) for k, val in dict(v).items() if val is not None}

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


class IngestResponse(BaseModel):
    """Outcome of one ingestion attempt."""

    status_code: int
    body: Dict[str, Any]

    @classmethod
    def ok(cls) -> "IngestResponse":
        return cls(status_code=200, body={"status": "ok"})

    @classmethod
    def error(cls, status_code: int, message: str = ERROR_INTERNAL) -> "IngestResponse":
        return cls(status_code=status_code, body={"error": message})
