"""Shared constants for the tracker ingestion API."""

API_NAME = "[tracker-ingest]"

# Request headers (matched case-insensitively)
TRACKER_KEY_HEADER = "x-tracker-key"
SIGNATURE_HEADER = "x-signature"
CONTENT_LENGTH_HEADER = "content-length"

# Request gate
MAX_BODY_BYTES = 2048

# Coordinate bounds
LAT_MIN, LAT_MAX = -90.0, 90.0
LNG_MIN, LNG_MAX = -180.0, 180.0

# Optional-field bounds (strict validation mode only)
SPEED_KPH_MIN = 0.0
HEADING_MIN, HEADING_MAX = 0.0, 360.0
ACCURACY_M_MIN = 0.0
BATTERY_PCT_MIN, BATTERY_PCT_MAX = 0.0, 100.0

# Storage
DEVICES_TABLE = "tracker_devices"
VEHICLES_TABLE = "vehicles"
POSITIONS_TABLE = "vehicle_positions"

# Public error messages
ERROR_METHOD_NOT_ALLOWED = "Method not allowed"
ERROR_PAYLOAD_TOO_LARGE = "Payload too large"
ERROR_MISSING_KEY = "Missing API key"
ERROR_UNKNOWN_KEY = "Unknown key"
ERROR_DEVICE_DISABLED = "Device disabled"
ERROR_INVALID_SIGNATURE = "Invalid signature"
ERROR_BAD_PAYLOAD = "Bad payload"
ERROR_INTERNAL = "Internal error"
