"""
Concierge chat API.

GET    /v1/concierge — Active conversation + AI allowance
POST   /v1/concierge — Send a message (counts against the free allowance)
DELETE /v1/concierge — Clear the conversation (marks it inactive)
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_tenant, get_db
from ..core.guardrails import check_input
from ..models.conversation import CONCIERGE
from ..orchestrator.orchestrator import handle_turn
from ..orchestrator.state import (
    deactivate_conversations,
    get_or_create_conversation,
    load_history,
)
from ..services.tenants import get_tenant
from ..services.usage import check_and_increment, get_usage
from .errors import api_error, turn_error

logger = logging.getLogger(__name__)

concierge_router = APIRouter(prefix="/concierge", tags=["concierge"])


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConciergeRequest(_Camel):
    message: str


class AIAccess(_Camel):
    messages_used: int
    messages_remaining: Union[int, str]
    has_full_access: bool
    limit: int


class ConciergeResponse(_Camel):
    message: str
    conversation_id: str
    ai_access: AIAccess


class MessageOut(_Camel):
    role: str
    content: str
    timestamp: Optional[str] = None


class ConciergeHistory(_Camel):
    conversation_id: str
    messages: list[MessageOut] = []
    ai_access: AIAccess


@concierge_router.get("", response_model=ConciergeHistory)
async def get_concierge(
    user: AuthenticatedUser = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Load (or start) the active concierge conversation."""
    try:
        tenant = await get_tenant(db, user.tenant_id)
    except Exception as e:
        raise turn_error(e, "Failed to get conversation")

    convo = await get_or_create_conversation(db, user.tenant_id, CONCIERGE)
    return ConciergeHistory(
        conversation_id=convo.id,
        messages=[MessageOut(**m) for m in load_history(convo)],
        ai_access=AIAccess(**get_usage(tenant).to_dict()),
    )


@concierge_router.post("", response_model=ConciergeResponse)
async def concierge_turn(
    request: ConciergeRequest,
    user: AuthenticatedUser = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Send a message to the concierge."""
    check = check_input(request.message, user.tenant_id)
    if not check.allowed:
        raise api_error(status.HTTP_400_BAD_REQUEST, "Message is required", check.reason)

    try:
        tenant = await get_tenant(db, user.tenant_id)
        usage = await check_and_increment(db, tenant)
    except Exception as e:
        raise turn_error(e)

    if not usage.allowed:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={
                "error": "AI message limit reached",
                "limitReached": True,
                "messagesUsed": usage.used,
                "limit": usage.to_dict()["limit"],
            },
        )

    try:
        result = await handle_turn(
            "concierge",
            message=request.message,
            tenant_id=user.tenant_id,
            db=db,
        )
    except Exception as e:
        raise turn_error(e)

    return ConciergeResponse(
        message=result["message"],
        conversation_id=result["conversationId"],
        ai_access=AIAccess(**usage.to_dict()),
    )


@concierge_router.delete("")
async def clear_concierge(
    user: AuthenticatedUser = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Mark the active conversation inactive. The next GET/POST starts a new one."""
    await deactivate_conversations(db, user.tenant_id, CONCIERGE)
    return {"success": True}
