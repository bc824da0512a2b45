"""Device registry repository."""

import asyncpg
import logging
from typing import Optional

from ..constants import DEVICES_TABLE
from ..models.device import Device

logger = logging.getLogger(__name__)


class DeviceRepository:
    """Read-only access to the device registry (owned by provisioning)."""

    def __init__(self, table_name: str = DEVICES_TABLE):
        """Initialize repository.

        Args:
            table_name: Name of the device registry table
        """
        self.table_name = table_name

    async def find_by_api_key(self, api_key: str, conn: asyncpg.Connection) -> Optional[Device]:
        """Find the device registered under an API key.

        Exact match on the credential column, at most one row is read.

        Args:
            api_key: Presented bearer credential
            conn: Database connection (required)

        Returns:
            The matching Device, or None if no device uses this key
        """
        record = await conn.fetchrow(
            f"""
            SELECT api_key, secret, enabled
            FROM {self.table_name}
            WHERE api_key = $1
            LIMIT 1
            """,
            api_key,
        )
        if record is None:
            return None
        return Device.from_record(record)
