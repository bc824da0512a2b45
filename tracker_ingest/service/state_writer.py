"""Atomic dual-write of vehicle state and position history."""

import asyncpg
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

from ..constants import API_NAME
from ..exceptions import StorageError
from ..models.ping import Ping
from ..repository import PositionRepository, VehicleRepository

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _now_ms() -> int:
    return int(time.time() * 1000)


def history_key(sent_at: Optional[float], received_ms: int) -> Tuple[str, float]:
    """Deterministic history key and event time in epoch milliseconds.

    The caller's ``sentAt`` is used when present; otherwise the receipt
    time. Two pings with the same key overwrite each other.
    """
    millis = sent_at if sent_at else received_ms
    if isinstance(millis, float) and millis.is_integer():
        millis = int(millis)
    return str(millis), millis


def millis_to_datetime(millis: float) -> datetime:
    return EPOCH + timedelta(milliseconds=millis)


class StateWriter:
    """Writes an accepted ping to current state and history in one transaction."""

    def __init__(
        self,
        vehicle_repo: VehicleRepository,
        position_repo: PositionRepository,
        clock: Callable[[], int] = _now_ms,
    ):
        """Initialize writer with repositories.

        Args:
            vehicle_repo: Vehicle current-state repository
            position_repo: Position history repository
            clock: Returns the receipt time in epoch milliseconds
        """
        self.vehicle_repo = vehicle_repo
        self.position_repo = position_repo
        self.clock = clock

    async def write(self, ping: Ping, conn: asyncpg.Connection) -> str:
        """Merge the vehicle state and upsert the history entry atomically.

        Both statements run in one transaction; if either fails nothing is
        committed. No retry is attempted.

        Args:
            ping: Validated ping
            conn: Database connection

        Returns:
            The history_id written

        Raises:
            StorageError: The transaction failed
        """
        history_id, at_ms = history_key(ping.sent_at, self.clock())
        at = millis_to_datetime(at_ms)

        try:
            async with conn.transaction():
                await self.vehicle_repo.merge_state(
                    ping.vehicle_id, ping.vehicle_fields(), conn=conn
                )
                await self.position_repo.upsert(
                    ping.vehicle_id, history_id, ping.history_fields(), at, conn=conn
                )
        except Exception as e:
            logger.error(
                f"{API_NAME} Transaction failed for vehicle {ping.vehicle_id}: {e}",
                exc_info=True,
                extra={'vehicle_id': ping.vehicle_id, 'history_id': history_id},
            )
            raise StorageError(detail=str(e)) from e

        logger.debug(
            f"{API_NAME} Stored ping for vehicle {ping.vehicle_id} (history_id={history_id})",
            extra={'vehicle_id': ping.vehicle_id, 'history_id': history_id},
        )
        return history_id
