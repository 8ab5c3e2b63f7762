"""
Conversation persistence.

History lives in the conversations.messages JSON column. Every turn writes
the full list back in one update. There is no version check: two turns racing
for the same conversation both succeed and the later write wins.
"""

import logging
from typing import Optional

from sqlalchemy import select, update, delete as sql_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from ..models.base import utcnow
from ..models.conversation import Conversation

logger = logging.getLogger(__name__)

VALID_ROLES = {"user", "assistant"}


async def get_or_create_conversation(
    db: AsyncSession,
    tenant_id: str,
    kind: str,
    conversation_id: Optional[str] = None,
    title: Optional[str] = None,
) -> Conversation:
    """
    Resolve the conversation for a turn.

    With an id: that conversation, if it belongs to the tenant and is of this kind.
    Without one (or if the id is unknown): the tenant's latest active
    conversation of this kind, else a new one.
    """
    convo = None
    if conversation_id:
        result = await db.execute(
            select(Conversation).where(
                Conversation.id == conversation_id,
                Conversation.tenant_id == tenant_id,
                Conversation.kind == kind,
            )
        )
        convo = result.scalar_one_or_none()
        if convo is None:
            logger.info("Conversation %s not found for tenant %s; starting fresh", conversation_id, tenant_id)

    if convo is None:
        convo = await get_active_conversation(db, tenant_id, kind)

    if convo is None:
        convo = Conversation(
            tenant_id=tenant_id,
            kind=kind,
            title=title,
            messages=[],
            is_active=True,
        )
        db.add(convo)
        await db.flush()
        logger.info("Created %s conversation: %s (tenant=%s)", kind, convo.id, tenant_id)

    return convo


async def get_active_conversation(
    db: AsyncSession,
    tenant_id: str,
    kind: str,
) -> Optional[Conversation]:
    result = await db.execute(
        select(Conversation)
        .where(
            Conversation.tenant_id == tenant_id,
            Conversation.kind == kind,
            Conversation.is_active == True,  # noqa: E712
        )
        .order_by(Conversation.updated_at.desc(), Conversation.created_at.desc())
        .limit(1)
    )
    return result.scalars().first()


def load_history(convo: Conversation) -> list[dict]:
    """Stored messages, keeping only well-formed user/assistant entries."""
    messages = convo.messages if isinstance(convo.messages, list) else []
    return [
        m for m in messages
        if isinstance(m, dict)
        and m.get("role") in VALID_ROLES
        and isinstance(m.get("content"), str)
    ]


def to_llm_messages(history: list[dict]) -> list[dict]:
    """Strip storage-only keys (timestamps) before sending to the LLM."""
    return [{"role": m["role"], "content": m["content"]} for m in history]


def make_message(role: str, content: str) -> dict:
    return {"role": role, "content": content, "timestamp": utcnow().isoformat()}


async def save_history(
    db: AsyncSession,
    convo: Conversation,
    messages: list[dict],
) -> None:
    """Replace the whole history in one write."""
    convo.messages = list(messages)
    flag_modified(convo, "messages")

    if not convo.title:
        first_user = next((m["content"] for m in messages if m["role"] == "user"), "")
        if first_user:
            convo.title = first_user[:80].strip() + ("..." if len(first_user) > 80 else "")

    await db.flush()


async def deactivate_conversations(db: AsyncSession, tenant_id: str, kind: str) -> None:
    """Mark the tenant's active conversations of this kind inactive."""
    await db.execute(
        update(Conversation)
        .where(
            Conversation.tenant_id == tenant_id,
            Conversation.kind == kind,
            Conversation.is_active == True,  # noqa: E712
        )
        .values(is_active=False)
    )
    await db.flush()


async def delete_conversations(db: AsyncSession, tenant_id: str, kind: str) -> int:
    """Delete every conversation of this kind for the tenant. Returns the count."""
    result = await db.execute(
        sql_delete(Conversation).where(
            Conversation.tenant_id == tenant_id,
            Conversation.kind == kind,
        )
    )
    await db.flush()
    return result.rowcount or 0
