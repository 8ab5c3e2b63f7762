"""
Tenant lookup and provisioning.
"""

import logging
import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.tenant import Tenant

logger = logging.getLogger(__name__)


class TenantNotFoundError(LookupError):
    """The authenticated tenant id has no tenant row."""


async def get_tenant(db: AsyncSession, tenant_id: str) -> Tenant:
    tenant = await db.get(Tenant, tenant_id)
    if tenant is None:
        raise TenantNotFoundError(f"Tenant not found: {tenant_id}")
    return tenant


def slugify(value: str) -> str:
    """"Emma & James" → "emma-james"."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "couple"


async def create_tenant(
    db: AsyncSession,
    slug: str,
    display_name: str = "",
    tenant_id: Optional[str] = None,
    plan: str = "free",
) -> Tenant:
    tenant = Tenant(slug=slugify(slug), display_name=display_name, plan=plan)
    if tenant_id:
        tenant.id = tenant_id
    db.add(tenant)
    await db.flush()
    logger.info("Created tenant %s (slug=%s, plan=%s)", tenant.id, tenant.slug, plan)
    return tenant


async def ensure_tenant(db: AsyncSession, tenant_id: str, slug: str) -> Tenant:
    """Get the tenant row, creating it if missing. Used for the dev tenant."""
    result = await db.execute(select(Tenant).where(Tenant.id == tenant_id))
    tenant = result.scalar_one_or_none()
    if tenant is None:
        tenant = await create_tenant(db, slug=slug, tenant_id=tenant_id)
    return tenant
