"""Lambda handler for the tracker ingestion API."""

import asyncio
import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional

# Configure logging FIRST before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from .config import LambdaConfig, apply_log_level, load_lambda_config
from .constants import API_NAME, ERROR_BAD_PAYLOAD, ERROR_INTERNAL
from .models.request import IngestRequest, IngestResponse
from .repository import get_connection
from .service import IngestionService, build_ingestion_service

# Global service instance (reused across invocations of a warm container).
# It holds configuration and stateless stages only; every invocation opens
# and closes its own connection.
_service: Optional[IngestionService] = None
_config: Optional[LambdaConfig] = None


def _initialize_service() -> IngestionService:
    """Initialize service with direct connections (no pooling).

    RDS Proxy handles connection pooling at the infrastructure level,
    so each request uses one direct connection.
    """
    global _service, _config

    if _service is None:
        _config = load_lambda_config()
        apply_log_level(_config.log_level)
        config = _config

        async def connection_factory():
            return await get_connection(config)

        _service = build_ingestion_service(config, connection_factory)
        logger.info(f"{API_NAME} Lambda handler initialized (direct connections)")

    return _service


def _create_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Create API Gateway HTTP API v2 response."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def _raw_body(event: Dict[str, Any]) -> bytes:
    """Exact request body bytes; API Gateway base64-encodes binary bodies."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body, validate=True)
    return body.encode("utf-8")


def to_ingest_request(event: Dict[str, Any], context: Any = None) -> IngestRequest:
    """Translate an API Gateway (HTTP API v2 or REST v1) event into an IngestRequest."""
    request_context = event.get("requestContext") or {}
    http_context = request_context.get("http") or {}
    method = http_context.get("method") or event.get("httpMethod") or ""

    request_id = request_context.get("requestId")
    if not request_id and context is not None:
        # LambdaContext uses 'aws_request_id', not 'request_id'
        request_id = getattr(context, "aws_request_id", None)

    return IngestRequest(
        method=method,
        headers=event.get("headers") or {},
        raw_body=_raw_body(event),
        request_id=request_id,
    )


async def _async_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Async handler implementation."""
    try:
        request = to_ingest_request(event, context)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"{API_NAME} Undecodable request body: {e}")
        return _create_response(400, {"error": ERROR_BAD_PAYLOAD})

    logger.info(
        f"{API_NAME} Lambda request",
        extra={
            "request_id": request.request_id,
            "method": request.method,
            "body_length": len(request.raw_body),
        },
    )

    service = _initialize_service()
    response: IngestResponse = await service.handle(request)
    return _create_response(response.status_code, response.body)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler for API Gateway.

    Uses asyncio.run() to create a fresh event loop per invocation, so the
    asyncpg connection is created and used in the same loop.
    """
    try:
        return asyncio.run(_async_handler(event, context))
    except Exception as e:
        logger.error(f"{API_NAME} Handler initialization or execution failed: {e}", exc_info=True)
        return _create_response(500, {"error": ERROR_INTERNAL})
