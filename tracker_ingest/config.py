"""Configuration management for Lambda environment."""

import os
import logging
from typing import Optional

from .constants import MAX_BODY_BYTES

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


class LambdaConfig:
    """Lambda-specific configuration."""

    def __init__(
        self,
        database_url: str,
        log_level: str,
        db_host: Optional[str] = None,
        db_port: int = 5432,
        db_name: Optional[str] = None,
        db_user: Optional[str] = None,
        use_iam_auth: bool = False,
        aws_region: str = "us-east-1",
        connect_timeout: float = 15.0,
        command_timeout: float = 30.0,
        pool_min_size: int = 1,
        pool_max_size: int = 10,
        max_body_bytes: int = MAX_BODY_BYTES,
        strict_validation: bool = False,
    ):
        self.database_url = database_url
        self.log_level = log_level
        self.db_host = db_host
        self.db_port = db_port
        self.db_name = db_name
        self.db_user = db_user
        self.use_iam_auth = use_iam_auth
        self.aws_region = aws_region
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout
        self.pool_min_size = pool_min_size
        self.pool_max_size = pool_max_size
        self.max_body_bytes = max_body_bytes
        self.strict_validation = strict_validation


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {raw!r}, using default {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}: {raw!r}, using default {default}")
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUE_VALUES


def apply_log_level(log_level: str) -> None:
    """Set the root logger level from a LOG_LEVEL value."""
    if log_level == "debug":
        logging.getLogger().setLevel(logging.DEBUG)
    elif log_level == "warn":
        logging.getLogger().setLevel(logging.WARNING)
    elif log_level == "error":
        logging.getLogger().setLevel(logging.ERROR)
    else:
        logging.getLogger().setLevel(logging.INFO)


def load_lambda_config() -> LambdaConfig:
    """
    Load configuration for Lambda environment.
    Supports both direct DATABASE_URL and component-based configuration.
    With IAM auth enabled the password is generated per connection, so the
    component settings are kept alongside the URL.
    """
    db_host = os.getenv("DB_HOST", "localhost").strip()
    db_port = _env_int("DB_PORT", 5432)
    db_name = os.getenv("DB_NAME", "tracker").strip()
    db_user = os.getenv("DB_USER", "postgres").strip()
    db_password = os.getenv("DB_PASSWORD", "").strip()

    database_url = os.getenv("DATABASE_URL", "").strip()
    if database_url and ('\n' in database_url or '\r' in database_url):
        logger.warning("DATABASE_URL contains newlines, falling back to component-based configuration")
        database_url = ""

    if not database_url:
        if db_password:
            database_url = f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"
        else:
            database_url = f"postgresql://{db_user}@{db_host}:{db_port}/{db_name}"
        logger.info(f"Using component-based configuration: {db_user}@{db_host}:{db_port}/{db_name}")

    max_body_bytes = _env_int("MAX_BODY_BYTES", MAX_BODY_BYTES)
    if max_body_bytes <= 0:
        logger.warning(f"MAX_BODY_BYTES must be positive, using default {MAX_BODY_BYTES}")
        max_body_bytes = MAX_BODY_BYTES

    return LambdaConfig(
        database_url=database_url,
        log_level=os.getenv("LOG_LEVEL", "info").strip().lower(),
        db_host=db_host,
        db_port=db_port,
        db_name=db_name,
        db_user=db_user,
        use_iam_auth=_env_bool("DB_IAM_AUTH"),
        aws_region=os.getenv("AWS_REGION", "us-east-1"),
        connect_timeout=_env_float("DB_CONNECT_TIMEOUT", 15.0),
        command_timeout=_env_float("DB_COMMAND_TIMEOUT", 30.0),
        pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        pool_max_size=_env_int("DB_POOL_MAX_SIZE", 10),
        max_body_bytes=max_body_bytes,
        strict_validation=_env_bool("STRICT_TELEMETRY_VALIDATION"),
    )
