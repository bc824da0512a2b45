"""Repository layer for database operations."""

from .device_repo import DeviceRepository
from .vehicle_repo import VehicleRepository
from .position_repo import PositionRepository
from .connection import get_connection
from .connection_pool import create_connection_pool, close_connection_pool

__all__ = [
    "DeviceRepository",
    "VehicleRepository",
    "PositionRepository",
    "get_connection",
    "create_connection_pool",
    "close_connection_pool",
]
