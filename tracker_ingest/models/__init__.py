"""Models for the tracker ingestion API."""

from .device import Device
from .ping import Ping
from .request import IngestRequest, IngestResponse

__all__ = ["Device", "Ping", "IngestRequest", "IngestResponse"]
