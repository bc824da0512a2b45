"""Vehicle current-state repository."""

import asyncpg
import json
import logging
from typing import Any, Dict

from ..constants import VEHICLES_TABLE

logger = logging.getLogger(__name__)


class VehicleRepository:
    """Repository for the latest known state of each vehicle."""

    def __init__(self, table_name: str = VEHICLES_TABLE):
        """Initialize repository.

        Args:
            table_name: Name of the vehicles table
        """
        self.table_name = table_name

    async def merge_state(self, vehicle_id: str, fields: Dict[str, Any],
                          conn: asyncpg.Connection) -> None:
        """Merge telemetry fields into a vehicle's state, creating it if absent.

        Keys present in ``fields`` replace the stored ones; stored keys not
        present in ``fields`` are kept. ``updated_at`` is set by the database.

        Args:
            vehicle_id: Vehicle identifier (primary key)
            fields: Telemetry fields to merge (stored as JSONB)
            conn: Database connection (required, transaction managed externally)
        """
        await conn.execute(
            f"""
            INSERT INTO {self.table_name} (vehicle_id, state, updated_at)
            VALUES ($1, $2::jsonb, now())
            ON CONFLICT (vehicle_id) DO UPDATE
            SET state = {self.table_name}.state || EXCLUDED.state,
                updated_at = EXCLUDED.updated_at
            """,
            vehicle_id,
            json.dumps(fields),
        )
