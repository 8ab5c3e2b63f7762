"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import TenantBase, TimestampedBase
from .tenant import Tenant
from .kernel import WeddingKernel
from .conversation import Conversation

__all__ = [
    "TenantBase", "TimestampedBase",
    "Tenant",
    "WeddingKernel",
    "Conversation",
]
