"""
Main turn pipeline.

Load tenant → load conversation + kernel → build prompt → LLM →
parse extraction → merge into kernel → agent hook → save history → notify.

Every assistant (onboarding, concierge) runs through handle_turn(). Errors
from the LLM call propagate; the route turns them into a 500. A broken
extraction block never fails the turn.
"""

import logging
import time
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .base_agent import AgentResponse, TurnContext
from .registry import get_registry
from .state import (
    get_or_create_conversation,
    load_history,
    make_message,
    save_history,
    to_llm_messages,
)
from ..core.guardrails import check_output
from ..services import llm, realtime
from ..services.extraction import parse_reply
from ..services.kernel import apply_extraction, get_or_create_kernel, kernel_snapshot
from ..services.tenants import get_tenant

logger = logging.getLogger(__name__)


async def handle_turn(
    agent_name: str,
    message: Optional[str],
    tenant_id: str,
    db: AsyncSession,
    conversation_id: Optional[str] = None,
    today: Optional[date] = None,
) -> dict:
    """
    Run one conversational turn.

    message=None means the couple opened the chat without typing: the model
    is sent a synthetic instruction (greeting or welcome-back) instead, and
    only the assistant reply is added to the history.

    Returns {message, conversationId, changedFields, **agent extras}.
    Raises TenantNotFoundError, ValueError (unknown agent, missing LLM key),
    and httpx errors from the provider.
    """
    start = time.monotonic()

    agent = get_registry().get(agent_name)
    if agent is None:
        raise ValueError(f"Unknown agent: {agent_name}")

    # 1. Tenant, conversation, kernel
    tenant = await get_tenant(db, tenant_id)
    convo = await get_or_create_conversation(
        db, tenant_id, agent.conversation_kind,
        conversation_id=conversation_id,
        title=agent.conversation_title,
    )
    history = load_history(convo)
    kernel = await get_or_create_kernel(db, tenant_id)

    ctx = TurnContext(
        tenant=tenant,
        kernel=kernel_snapshot(kernel),
        history=history,
        message=message,
        today=today or date.today(),
    )

    # 2. Prompt + outgoing messages
    system_prompt = agent.build_system_prompt(ctx)
    outgoing = to_llm_messages(history)
    if message:
        outgoing.append({"role": "user", "content": message})
    elif not history:
        outgoing = [{"role": "user", "content": agent.opening_instruction(ctx)}]
    else:
        outgoing.append({"role": "user", "content": agent.returning_instruction(ctx)})

    logger.info(
        "Turn start: agent=%s tenant=%s convo=%s history=%d has_message=%s",
        agent_name, tenant_id, convo.id, len(history), bool(message),
    )

    # 3. LLM (errors propagate)
    try:
        raw = await llm.complete(system_prompt, outgoing, max_tokens=agent.max_tokens)
    except Exception as e:
        await realtime.chat_error(tenant_id, convo.id, {"agent": agent_name, "error": str(e)})
        raise

    # 4. Parse, clean, merge
    parsed = parse_reply(raw)
    reply = parsed.reply
    output_check = check_output(reply)
    if output_check.modified:
        reply = output_check.modified

    response = AgentResponse(content=reply, extraction=parsed.extraction)
    response.changed_fields = await apply_extraction(db, tenant, kernel, parsed.extraction)
    response.extras = await agent.after_turn(db, ctx, kernel, parsed.extraction)

    # 5. History: user message (if any) + assistant reply
    new_messages = list(history)
    if message:
        new_messages.append(make_message("user", message))
    new_messages.append(make_message("assistant", response.content))
    await save_history(db, convo, new_messages)

    # 6. Realtime
    if response.changed_fields:
        await realtime.kernel_updated(tenant_id, response.changed_fields)
    await realtime.chat_completed(tenant_id, convo.id, {
        "agent": agent_name,
        "changedFields": response.changed_fields,
    })

    latency_ms = int((time.monotonic() - start) * 1000)
    logger.info(
        "Turn done: agent=%s tenant=%s latency=%dms extracted=%s changed=%s",
        agent_name, tenant_id, latency_ms,
        parsed.had_block, ",".join(response.changed_fields) or "-",
    )

    return {
        "message": response.content,
        "conversationId": convo.id,
        "changedFields": response.changed_fields,
        **response.extras,
    }
