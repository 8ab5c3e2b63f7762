"""
Tenants. One couple = one tenant.

display_name and wedding_date are denormalized copies of kernel facts so the
rest of the product can read them without loading the kernel.
"""

from datetime import date

from sqlalchemy import String, Integer, Boolean, Date
from sqlalchemy.orm import Mapped, mapped_column

from .base import TimestampedBase

FREE_PLAN = "free"


class Tenant(TimestampedBase):
    __tablename__ = "tenants"

    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String, nullable=False, default="")  # "Emma & James"
    wedding_date: Mapped[date] = mapped_column(Date, nullable=True)
    plan: Mapped[str] = mapped_column(String, nullable=False, default=FREE_PLAN)
    # free, monthly, yearly, premium_monthly, premium_yearly
    ai_messages_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    onboarding_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
