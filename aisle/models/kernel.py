"""
Wedding kernel: the per-tenant fact sheet built up from conversation.

Column groups follow the order the context builder renders them in.
List columns are set-like (names, vibe, ...) or append-only (stressors);
the extraction pipeline only ever grows them.
"""

from datetime import date, datetime

from sqlalchemy import String, Text, Integer, Boolean, Date, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import TenantBase


class WeddingKernel(TenantBase):
    __tablename__ = "wedding_kernels"
    __table_args__ = (UniqueConstraint("tenant_id", name="uq_wedding_kernels_tenant"),)

    # Identity
    names: Mapped[list] = mapped_column(JSON, nullable=False, default=list)  # ["Emma", "James"]
    location: Mapped[str] = mapped_column(String, nullable=True)
    occupations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Relationship story
    how_they_met: Mapped[str] = mapped_column(Text, nullable=True)
    how_long_together: Mapped[str] = mapped_column(String, nullable=True)
    engagement_story: Mapped[str] = mapped_column(Text, nullable=True)

    # Wedding basics
    wedding_date: Mapped[date] = mapped_column(Date, nullable=True)
    guest_count: Mapped[int] = mapped_column(Integer, nullable=True)
    budget_total: Mapped[int] = mapped_column(Integer, nullable=True)  # cents
    vibe: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    formality: Mapped[str] = mapped_column(String, nullable=True)
    color_palette: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Planning status
    planning_phase: Mapped[str] = mapped_column(String, nullable=True)
    # dreaming, early, mid, final, week_of
    decisions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    # {"venue": {"name": "The Barn", "status": "booked", "locked": true}, ...}
    vendors_booked: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Concerns
    priorities: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    biggest_concern: Mapped[str] = mapped_column(Text, nullable=True)
    stressors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # Communication profile
    uses_emojis: Mapped[bool] = mapped_column(Boolean, nullable=True)
    uses_swearing: Mapped[bool] = mapped_column(Boolean, nullable=True)
    message_length: Mapped[str] = mapped_column(String, nullable=True)  # short, medium, long
    knowledge_level: Mapped[str] = mapped_column(String, nullable=True)  # beginner, intermediate, experienced
    communication_style: Mapped[str] = mapped_column(String, nullable=True)  # casual, balanced, formal

    # Onboarding
    onboarding_step: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    onboarding_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_interaction: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
