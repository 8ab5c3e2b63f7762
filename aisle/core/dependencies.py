"""
FastAPI dependencies for the /v1 routes: a per-request unit of work and the
couple (tenant) the request acts for.
"""

import logging
from typing import AsyncIterator

from fastapi import Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import AuthenticatedUser, get_current_user
from .database import session_scope
from ..api.errors import api_error

logger = logging.getLogger(__name__)

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


async def get_db() -> AsyncIterator[AsyncSession]:
    """A whole turn commits or rolls back together."""
    async with session_scope() as session:
        yield session


async def get_user(authorization: str = Header(default="")) -> AuthenticatedUser:
    try:
        return await get_current_user(authorization)
    except PermissionError as e:
        logger.info("Rejected request: %s", e)
        raise api_error(status.HTTP_401_UNAUTHORIZED, "Unauthorized", str(e), headers=_CHALLENGE)


async def require_tenant(
    user: AuthenticatedUser = Depends(get_user),
) -> AuthenticatedUser:
    """Every kernel and conversation row is scoped to a tenant; a token without one is refused."""
    if not user.tenant_id:
        logger.info("Rejected user %s: token carries no tenant", user.user_id)
        raise api_error(
            status.HTTP_401_UNAUTHORIZED, "Unauthorized", "No tenant on this account", headers=_CHALLENGE,
        )
    return user
