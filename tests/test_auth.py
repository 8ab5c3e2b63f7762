"""Tests for user resolution and tenant enforcement."""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi import HTTPException

from aisle.core.auth import DEV_TENANT_ID, AuthenticatedUser, get_current_user
from aisle.core.dependencies import get_user, require_tenant


def _flags(use_auth0: bool):
    return patch("aisle.core.auth.get_flags", return_value=SimpleNamespace(use_auth0=use_auth0))


class TestGetCurrentUser:
    @pytest.mark.asyncio
    async def test_dev_mode_returns_dev_tenant(self) -> None:
        with _flags(False):
            user = await get_current_user("")
        assert user.tenant_id == DEV_TENANT_ID

    @pytest.mark.asyncio
    async def test_missing_header_rejected(self) -> None:
        with _flags(True):
            with pytest.raises(PermissionError):
                await get_current_user("")

    @pytest.mark.asyncio
    async def test_non_bearer_rejected(self) -> None:
        with _flags(True):
            with pytest.raises(PermissionError):
                await get_current_user("Basic abc")


class TestDependencies:
    @pytest.mark.asyncio
    async def test_get_user_maps_to_401(self) -> None:
        with _flags(True):
            with pytest.raises(HTTPException) as exc_info:
                await get_user(authorization="")
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["error"] == "Unauthorized"
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    @pytest.mark.asyncio
    async def test_require_tenant_without_tenant_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await require_tenant(user=AuthenticatedUser(user_id="u1"))
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == {"error": "Unauthorized", "details": "No tenant on this account"}
