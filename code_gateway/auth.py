"""
Caller identity resolution.

The gateway runs behind an identity proxy that authenticates the user and
forwards their id in a trusted header. Identity is resolved once per
request and passed explicitly into every service operation.
"""

from typing import Optional

from fastapi import Depends, Request

from code_gateway.config import Settings
from code_gateway.dependencies import get_settings


def resolve_user_id(request: Request, current: Settings = Depends(get_settings)) -> Optional[str]:
    """
    Resolve the caller identity from the request.

    Args:
        request: The incoming HTTP request
        current: Application settings naming the identity header

    Returns:
        The caller's user id, or None when the header is missing or blank
    """
    value = request.headers.get(current.auth_header)
    if value is None:
        return None
    return value.strip() or None
