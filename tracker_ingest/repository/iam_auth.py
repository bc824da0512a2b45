"""IAM authentication helper for RDS / Aurora PostgreSQL."""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
import logging
from datetime import datetime, timedelta
from typing import Optional

logger = logging.getLogger(__name__)

# Tokens are valid for 15 minutes; regenerate a minute early
TOKEN_CACHE_TTL = timedelta(minutes=14)

# Token cache with expiration
_token_cache: Optional[dict] = None


def generate_iam_auth_token(endpoint: str, port: int, db_user: str, region: str) -> str:
    """
    Generate an IAM authentication token to use as the database password.

    Tokens are cached per endpoint/port/user until shortly before they expire.

    Args:
        endpoint: Database host name
        port: Database port
        db_user: Database user mapped to an IAM policy
        region: AWS region for token generation

    Returns:
        IAM authentication token
    """
    global _token_cache

    cache_key = f"{endpoint}:{port}:{db_user}"
    if _token_cache is not None and _token_cache.get('key') == cache_key:
        if _token_cache['expires_at'] > datetime.utcnow():
            logger.debug("Using cached IAM auth token")
            return _token_cache['token']
        logger.info("IAM auth token expired or expiring soon, regenerating")

    try:
        client = boto3.client('rds', region_name=region)
        token = client.generate_db_auth_token(
            DBHostname=endpoint,
            Port=port,
            DBUsername=db_user,
            Region=region,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to generate IAM auth token: {e}", exc_info=True)
        raise

    _token_cache = {
        'token': token,
        'expires_at': datetime.utcnow() + TOKEN_CACHE_TTL,
        'key': cache_key,
    }
    logger.info(f"Generated new IAM auth token for {db_user}@{endpoint}:{port}")
    return token


def clear_token_cache():
    """Clear the token cache (useful for testing or forced refresh)."""
    global _token_cache
    _token_cache = None
    logger.debug("IAM auth token cache cleared")
