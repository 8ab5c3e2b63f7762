"""
Base models. Tenant-owned rows inherit TenantBase; the tenant row itself
only needs the id/timestamp columns.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


def utcnow():
    return datetime.now(timezone.utc)


def new_uuid():
    return str(uuid.uuid4())


class TimestampedBase(Base):
    """Abstract base: string UUID primary key plus created/updated timestamps."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=new_uuid
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class TenantBase(TimestampedBase):
    """Abstract base with tenant_id on every row."""

    __abstract__ = True

    tenant_id: Mapped[str] = mapped_column(
        String, nullable=False, index=True
    )
