"""
Concierge: the ongoing planning chat once onboarding is done.
"""

from ...models.conversation import CONCIERGE
from ...orchestrator.base_agent import BaseAgent, TurnContext
from .. import prompts

CAPABILITIES = """## What you help with
1. Vibe discovery. Help them articulate their aesthetic. Reflect back the patterns you hear.
2. Planning guidance. Timelines, etiquette, traditions, logistics. Be practical and specific.
3. Vendors. Help them think through what to look for and what to ask.
4. Budget. Where to splurge, where to save, and what tradeoffs look like against their total.
5. Support. Planning is stressful. Validate first, solve second. If they want to vent, let them."""


class ConciergeAgent(BaseAgent):
    name = "concierge"
    display_name = "Concierge"
    description = "Ongoing wedding planning chat grounded in the wedding kernel"
    conversation_kind = CONCIERGE
    max_tokens = 1024

    def build_system_prompt(self, ctx: TurnContext) -> str:
        return "\n\n".join([
            prompts.IDENTITY,
            prompts.context_block(ctx.kernel, ctx.today),
            prompts.STYLE_RULES,
            prompts.HONESTY_RULES,
            CAPABILITIES,
            prompts.extraction_instructions(),
        ])

    def opening_instruction(self, ctx: TurnContext) -> str:
        return (
            "[The user just opened the planning chat. Greet them warmly and ask an open-ended question "
            "about where they're at with wedding planning. Keep it natural. "
            "Remember: no emojis, no em dashes, max one exclamation point.]"
        )

    def returning_instruction(self, ctx: TurnContext) -> str:
        return prompts.returning_user_instruction(ctx.kernel)
