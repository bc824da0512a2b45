"""Ingestion pipeline stages and service."""

from .request_gate import RequestGate
from .authenticator import Authenticator, sign_body, verify_signature
from .payload_validator import PayloadValidator
from .state_writer import StateWriter
from .ingestion import IngestionService, build_ingestion_service

__all__ = [
    "RequestGate",
    "Authenticator",
    "PayloadValidator",
    "StateWriter",
    "IngestionService",
    "build_ingestion_service",
    "sign_body",
    "verify_signature",
]
