"""
BaseAgent: the onboarding assistant and the concierge both implement this.

The pipeline (orchestrator.handle_turn) is shared. An agent only decides:
  - what system prompt to send
  - what to send when the couple hasn't typed anything
  - what to do after the kernel merge (e.g. advance onboarding)
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.kernel import WeddingKernel
from ..models.tenant import Tenant
from ..services.extraction import KernelExtraction


@dataclass
class TurnContext:
    """Everything an agent sees for one turn."""

    tenant: Tenant
    kernel: dict                       # kernel_snapshot() before this turn's merge
    history: list[dict]                # stored history, oldest first
    message: Optional[str] = None      # None when the app was just opened
    today: date = field(default_factory=date.today)


@dataclass
class AgentResponse:
    """What a turn produces."""

    content: str = ""                                   # Reply shown to the couple
    extraction: KernelExtraction = field(default_factory=KernelExtraction)
    changed_fields: list[str] = field(default_factory=list)
    extras: dict = field(default_factory=dict)          # Agent-specific response keys


class BaseAgent:
    """
    Base class for chat agents.

    Attributes:
        name:               Internal ID ("onboarding")
        display_name:       Human-readable ("Onboarding Assistant")
        description:        What it does
        conversation_kind:  Which conversation stream it writes to
        conversation_title: Title given to a new conversation
        max_tokens:         Reply budget for the LLM call
    """

    name: str = ""
    display_name: str = ""
    description: str = ""
    conversation_kind: str = ""
    conversation_title: Optional[str] = None
    max_tokens: int = 1024

    def build_system_prompt(self, ctx: TurnContext) -> str:
        raise NotImplementedError(f"Agent '{self.name}' must implement build_system_prompt()")

    def opening_instruction(self, ctx: TurnContext) -> str:
        """Sent instead of an empty turn when there is no history and no message."""
        raise NotImplementedError(f"Agent '{self.name}' must implement opening_instruction()")

    def returning_instruction(self, ctx: TurnContext) -> str:
        """Sent when there is history but the couple hasn't typed anything."""
        return self.opening_instruction(ctx)

    async def after_turn(
        self,
        db: AsyncSession,
        ctx: TurnContext,
        kernel: WeddingKernel,
        extraction: KernelExtraction,
    ) -> dict:
        """Hook after the kernel merge. Returns extra response keys."""
        return {}
