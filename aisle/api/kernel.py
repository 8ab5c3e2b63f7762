"""
Kernel API.

GET /v1/kernel — Everything Aisle knows about the wedding (camelCase keys)
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_tenant, get_db
from ..services.kernel import get_or_create_kernel, kernel_snapshot
from ..services.tenants import get_tenant
from .errors import turn_error

kernel_router = APIRouter(prefix="/kernel", tags=["kernel"])


def _jsonable(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


@kernel_router.get("")
async def get_wedding_kernel(
    user: AuthenticatedUser = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    try:
        await get_tenant(db, user.tenant_id)
    except Exception as e:
        raise turn_error(e, "Failed to load kernel")

    kernel = await get_or_create_kernel(db, user.tenant_id)
    snapshot = {to_camel(k): _jsonable(v) for k, v in kernel_snapshot(kernel).items()}
    snapshot["id"] = kernel.id
    snapshot["tenantId"] = kernel.tenant_id
    return snapshot
