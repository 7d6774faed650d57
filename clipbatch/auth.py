"""X-API-Key guard for the batch and history routes.

Keys come from ``settings.api_keys``. With no keys configured the service runs
open (development mode) and every request is attributed to ``dev_mode``.
"""

import logging

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from .config import settings

logger = logging.getLogger("clipbatch.auth")

API_KEY_HEADER = "X-API-Key"
DEV_MODE_CALLER = "dev_mode"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def _mask(api_key: str) -> str:
    return f"{api_key[:4]}..." if len(api_key) > 4 else "***"


async def verify_api_key(api_key: str = Security(api_key_header)) -> str:
    """Return the caller's key, or ``dev_mode`` when auth is disabled.

    Raises:
        HTTPException: 401 if the key is missing or not configured
    """
    valid_keys = settings.get_valid_api_keys()
    if not valid_keys:
        return DEV_MODE_CALLER

    if not api_key:
        logger.warning("Rejected request without API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing API key. Provide {API_KEY_HEADER} header.",
        )

    if api_key not in valid_keys:
        logger.warning(f"Rejected request with unknown API key {_mask(api_key)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    return api_key
