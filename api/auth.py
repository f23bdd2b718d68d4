"""API key authentication dependency."""

import secrets
from typing import Optional

from fastapi import Header, HTTPException

from api.config import APIConfig


async def verify_api_key(
    x_api_key: Optional[str] = Header(None),
) -> Optional[str]:
    """Verify the X-API-Key header against API_KEY.

    Auth is disabled when API_KEY is not set. The environment is read per
    request so a key rotated by the process manager takes effect immediately.
    """
    expected = APIConfig.load().api_key
    if not expected:
        return None
    if not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing API key")
    return x_api_key
