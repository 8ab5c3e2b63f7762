"""
AI message allowance. Free-plan tenants get a fixed number of concierge
messages; any paid plan is unlimited.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import get_settings
from ..core.flags import get_flags
from ..models.tenant import Tenant, FREE_PLAN

logger = logging.getLogger(__name__)


@dataclass
class UsageResult:
    allowed: bool
    used: int
    remaining: Optional[int]  # None = unlimited

    def to_dict(self) -> dict:
        settings = get_settings()
        return {
            "messagesUsed": self.used,
            "messagesRemaining": "unlimited" if self.remaining is None else self.remaining,
            "hasFullAccess": self.remaining is None,
            "limit": settings.free_ai_message_limit,
        }


def has_unlimited_ai(tenant: Tenant) -> bool:
    return tenant.plan != FREE_PLAN or not get_flags().enforce_ai_limit


def get_usage(tenant: Tenant) -> UsageResult:
    """Current allowance without consuming a message."""
    used = tenant.ai_messages_used or 0
    if has_unlimited_ai(tenant):
        return UsageResult(allowed=True, used=used, remaining=None)
    remaining = max(0, get_settings().free_ai_message_limit - used)
    return UsageResult(allowed=remaining > 0, used=used, remaining=remaining)


async def check_and_increment(db: AsyncSession, tenant: Tenant) -> UsageResult:
    """Consume one message if the tenant still has allowance."""
    usage = get_usage(tenant)
    if not usage.allowed:
        logger.info("AI message limit reached for tenant %s (%d used)", tenant.id, usage.used)
        return usage

    tenant.ai_messages_used = usage.used + 1
    await db.flush()

    remaining = None if usage.remaining is None else usage.remaining - 1
    return UsageResult(allowed=True, used=usage.used + 1, remaining=remaining)
