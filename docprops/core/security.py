"""API key authentication for the extraction endpoints."""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from docprops.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


def _is_known_key(api_key: str, known_keys: list[str]) -> bool:
    """Constant-time membership check against the configured keys."""
    return any(hmac.compare_digest(api_key, known) for known in known_keys)


async def verify_api_key(
    api_key: Annotated[str | None, Security(API_KEY_HEADER)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """Validate the X-API-Key header when authentication is enabled.

    Returns:
        The accepted key, or an empty string when authentication is off.

    Raises:
        HTTPException: 401 when the key is missing or unknown.
    """
    if not settings.require_api_key:
        return ""

    if not api_key:
        logger.warning("Rejected request without API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key. Include X-API-Key header.",
        )

    if not _is_known_key(api_key, settings.api_keys):
        logger.warning(f"Rejected unknown API key: {api_key[:4]}...")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    return api_key


# Type alias for dependency injection
ApiKeyDep = Annotated[str, Depends(verify_api_key)]
