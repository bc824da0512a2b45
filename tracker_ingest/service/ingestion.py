"""Ping ingestion service: runs the request through every pipeline stage."""

import asyncpg
import logging
import time
from typing import Awaitable, Callable, Dict, Optional

from ..constants import API_NAME
from ..exceptions import IngestError, StorageError
from ..models.request import IngestRequest, IngestResponse
from ..repository import DeviceRepository, PositionRepository, VehicleRepository
from .authenticator import Authenticator, mask_key
from .payload_validator import PayloadValidator
from .request_gate import RequestGate
from .state_writer import StateWriter

logger = logging.getLogger(__name__)


async def _close_connection(conn: asyncpg.Connection) -> None:
    await conn.close()


class IngestionService:
    """Service for ingesting pings.

    Stages run strictly in order: request gate, authenticator, payload
    validator, state writer. A stage rejects the request by raising an
    ``IngestError``; the service turns it into an error response. The
    database is only touched after the credential is known to be present,
    and one connection serves both the registry read and the write.
    """

    def __init__(
        self,
        gate: RequestGate,
        authenticator: Authenticator,
        validator: PayloadValidator,
        writer: StateWriter,
        connection_factory: Callable[[], Awaitable[asyncpg.Connection]],
        release_connection: Callable[[asyncpg.Connection], Awaitable[None]] = _close_connection,
        api_name: str = API_NAME,
    ):
        """Initialize service with pipeline stages and connection handling.

        Args:
            gate: Request gate
            authenticator: Device authenticator
            validator: Payload validator
            writer: State writer
            connection_factory: Async function that returns a database connection
            release_connection: Async function that gives the connection back
                (close for direct connections, ``pool.release`` for a pool)
            api_name: API name for logging
        """
        self.gate = gate
        self.authenticator = authenticator
        self.validator = validator
        self.writer = writer
        self.connection_factory = connection_factory
        self.release_connection = release_connection
        self.api_name = api_name

    async def handle(self, request: IngestRequest) -> IngestResponse:
        """Process one ping request and return the response to send."""
        started = time.time()
        stage_ms: Dict[str, int] = {}
        try:
            history_id = await self._ingest(request, stage_ms)
        except IngestError as e:
            self._log_rejection(request, e, stage_ms)
            return IngestResponse.error(e.status_code, e.message)
        except Exception as e:
            logger.error(
                f"{self.api_name} Unexpected error ingesting ping: {e}",
                exc_info=True,
                extra={'request_id': request.request_id},
            )
            return IngestResponse.error(500)

        logger.info(
            f"{self.api_name} Ping accepted",
            extra={
                'request_id': request.request_id,
                'history_id': history_id,
                'duration_ms': int((time.time() - started) * 1000),
                'stage_ms': stage_ms,
            },
        )
        return IngestResponse.ok()

    async def _ingest(self, request: IngestRequest, stage_ms: Dict[str, int]) -> str:
        """Run the stages in order, recording each completed stage's duration in ``stage_ms``."""
        mark = time.time()

        def lap(stage: str) -> None:
            nonlocal mark
            now = time.time()
            stage_ms[stage] = int((now - mark) * 1000)
            mark = now

        self.gate.check(request)
        api_key = self.authenticator.extract_credential(request)
        lap('gate')

        conn = await self._acquire_connection()
        lap('connect')
        try:
            device = await self.authenticator.authenticate(request, api_key, conn=conn)
            lap('authenticate')
            logger.debug(f"{self.api_name} Authenticated device {mask_key(device.api_key)}")

            ping = self.validator.validate(request.raw_body)
            lap('validate')

            history_id = await self.writer.write(ping, conn=conn)
            lap('write')
            logger.debug(f"{self.api_name} Stage timings {stage_ms}", extra={'stage_ms': stage_ms})
            return history_id
        finally:
            await self._release(conn)

    async def _acquire_connection(self) -> asyncpg.Connection:
        try:
            return await self.connection_factory()
        except Exception as e:
            logger.error(f"{self.api_name} Could not obtain database connection: {e}", exc_info=True)
            raise StorageError(detail=f"connection failed: {e}") from e

    async def _release(self, conn: Optional[asyncpg.Connection]) -> None:
        if conn is None:
            return
        try:
            await self.release_connection(conn)
        except Exception as e:
            logger.warning(f"{self.api_name} Error releasing database connection: {e}")

    def _log_rejection(self, request: IngestRequest, error: IngestError,
                       stage_ms: Dict[str, int]) -> None:
        extra = {
            'request_id': request.request_id,
            'status_code': error.status_code,
            'error_type': type(error).__name__,
            'stage_ms': stage_ms,
        }
        if isinstance(error, StorageError):
            # Details already logged with the traceback where the failure happened
            logger.error(f"{self.api_name} Ping failed: {error.detail}", extra=extra)
        else:
            logger.warning(
                f"{self.api_name} Ping rejected ({error.status_code} {error.message}): {error.detail or '-'}",
                extra=extra,
            )


def build_ingestion_service(
    config,
    connection_factory: Callable[[], Awaitable[asyncpg.Connection]],
    release_connection: Callable[[asyncpg.Connection], Awaitable[None]] = _close_connection,
) -> IngestionService:
    """Wire the pipeline from configuration.

    Args:
        config: LambdaConfig with request limits and validation mode
        connection_factory: Async function that returns a database connection
        release_connection: Async function that gives the connection back
    """
    return IngestionService(
        gate=RequestGate(max_body_bytes=config.max_body_bytes),
        authenticator=Authenticator(DeviceRepository()),
        validator=PayloadValidator(strict=config.strict_validation),
        writer=StateWriter(VehicleRepository(), PositionRepository()),
        connection_factory=connection_factory,
        release_connection=release_connection,
    )
