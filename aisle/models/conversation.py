"""
Conversations with the onboarding assistant and the concierge.
The whole history lives in one JSON column and is replaced on every save.
"""

from sqlalchemy import String, Boolean, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import TenantBase

ONBOARDING = "onboarding"
CONCIERGE = "concierge"


class Conversation(TenantBase):
    __tablename__ = "conversations"

    kind: Mapped[str] = mapped_column(String, nullable=False, default=CONCIERGE, index=True)
    title: Mapped[str] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    messages: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # Example:
    # [
    #   {"role": "user", "content": "We're Emma and James", "timestamp": "2026-01-04T18:22:10+00:00"},
    #   {"role": "assistant", "content": "So lovely to meet you both...", "timestamp": "..."},
    # ]
