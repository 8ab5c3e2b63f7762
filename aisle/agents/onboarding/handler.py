"""
Onboarding assistant: the couple's first conversation with Aisle.

A short guided flow. The step is derived from how long the conversation
is (one exchange per step), and the model can push it forward early with
moveToNextStep once it has what the current step needs.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ...models.conversation import ONBOARDING
from ...models.kernel import WeddingKernel
from ...orchestrator.base_agent import BaseAgent, TurnContext
from ...services import realtime
from ...services.extraction import KernelExtraction
from ...services.kernel_context import build_kernel_context
from .. import prompts

logger = logging.getLogger(__name__)

FINAL_STEP = 7

STEPS = [
    "Greet them warmly and ask who's getting married (names)",
    "Ask when the wedding is (or if they've set a date yet)",
    "Ask roughly how many guests they're thinking",
    "Gently ask about budget range (make it comfortable to skip)",
    "Ask what vibe or feeling they want for their day",
    "Ask what they've already figured out (venue, photographer, etc.)",
    "Ask what's on their mind or stressing them out",
    "Summarize what you learned and transition to planning mode",
]

SYSTEM_PROMPT = """You are Aisle, an AI wedding planner having your first conversation with a new couple.
Your goal is to get to know them and understand where they are in their wedding planning journey.

You're warm, calm, and genuinely interested. You ask one question at a time and respond naturally to what they share.
Never feel like a form or checklist.

CURRENT ONBOARDING STEP: {step}
WHAT WE KNOW SO FAR:
{kernel}

ONBOARDING FLOW:
{flow}

STYLE:
- Never use emojis
- Never use em dashes, use commas or periods
- One question at a time
- Acknowledge what they share before asking the next thing
- If they give short answers, that's fine, move on
- If they share a lot, reflect that back briefly
- Keep responses concise, 2-3 sentences usually
- Be warm but not over-the-top

{extraction}
Set moveToNextStep to true when you've gotten enough info for the current step."""

FIRST_LOAD_INSTRUCTION = (
    "[User just opened the app for the first time. "
    "Greet them warmly and ask who's getting married.]"
)


def current_step(history: list[dict]) -> int:
    """One exchange per step, capped at the summary step."""
    return min(len(history) // 2, FINAL_STEP)


class OnboardingAgent(BaseAgent):
    name = "onboarding"
    display_name = "Onboarding Assistant"
    description = "Guided first conversation that fills in the wedding kernel"
    conversation_kind = ONBOARDING
    conversation_title = "Getting started"
    max_tokens = 500

    def build_system_prompt(self, ctx: TurnContext) -> str:
        flow = "\n".join(f"Step {i}: {text}" for i, text in enumerate(STEPS))
        return SYSTEM_PROMPT.format(
            step=current_step(ctx.history),
            kernel=build_kernel_context(ctx.kernel, today=ctx.today),
            flow=flow,
            extraction=prompts.extraction_instructions(with_step_flag=True),
        )

    def opening_instruction(self, ctx: TurnContext) -> str:
        return FIRST_LOAD_INSTRUCTION

    def returning_instruction(self, ctx: TurnContext) -> str:
        return prompts.returning_user_instruction(ctx.kernel)

    async def after_turn(
        self,
        db: AsyncSession,
        ctx: TurnContext,
        kernel: WeddingKernel,
        extraction: KernelExtraction,
    ) -> dict:
        step = current_step(ctx.history)
        new_step = step + 1 if extraction.move_to_next_step else step
        is_complete = new_step >= FINAL_STEP

        kernel.onboarding_step = new_step
        if is_complete and not ctx.tenant.onboarding_complete:
            ctx.tenant.onboarding_complete = True
            kernel.onboarding_complete = True
            logger.info("Onboarding complete for tenant %s", ctx.tenant.id)
            await realtime.onboarding_completed(ctx.tenant.id)
        elif is_complete:
            kernel.onboarding_complete = True

        await db.flush()
        return {"onboardingStep": new_step, "isOnboardingComplete": is_complete}
