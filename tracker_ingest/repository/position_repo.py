"""Position history repository."""

import asyncpg
import json
import logging
from datetime import datetime
from typing import Any, Dict

from ..constants import POSITIONS_TABLE

logger = logging.getLogger(__name__)


class PositionRepository:
    """Repository for the append-only position history of each vehicle."""

    def __init__(self, table_name: str = POSITIONS_TABLE):
        """Initialize repository.

        Args:
            table_name: Name of the position history table
        """
        self.table_name = table_name

    async def upsert(self, vehicle_id: str, history_id: str, fields: Dict[str, Any],
                     at: datetime, conn: asyncpg.Connection) -> None:
        """Create the history entry for (vehicle_id, history_id).

        An entry that already exists under the same key is replaced as a
        whole, not merged.

        Args:
            vehicle_id: Parent vehicle identifier
            history_id: Deterministic entry key
            fields: Position fields (stored as JSONB)
            at: Event timestamp
            conn: Database connection (required, transaction managed externally)
        """
        await conn.execute(
            f"""
            INSERT INTO {self.table_name} (vehicle_id, history_id, position, at)
            VALUES ($1, $2, $3::jsonb, $4)
            ON CONFLICT (vehicle_id, history_id) DO UPDATE
            SET position = EXCLUDED.position,
                at = EXCLUDED.at
            """,
            vehicle_id,
            history_id,
            json.dumps(fields),
            at,
        )
