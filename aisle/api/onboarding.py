"""
Onboarding chat API.

POST   /v1/chat/onboarding        — Run one onboarding turn (message optional)
GET    /v1/chat/onboarding        — Load the current onboarding conversation
DELETE /v1/chat/onboarding/reset  — Start onboarding over
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.auth import AuthenticatedUser
from ..core.dependencies import require_tenant, get_db
from ..core.guardrails import check_input
from ..models.conversation import ONBOARDING
from ..orchestrator.orchestrator import handle_turn
from ..orchestrator.state import (
    delete_conversations,
    get_active_conversation,
    load_history,
)
from ..services.kernel import get_kernel
from ..services.tenants import get_tenant
from .errors import api_error, turn_error

logger = logging.getLogger(__name__)

onboarding_router = APIRouter(prefix="/chat/onboarding", tags=["onboarding"])


class _Camel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OnboardingRequest(_Camel):
    message: Optional[str] = None
    conversation_id: Optional[str] = None


class OnboardingResponse(_Camel):
    message: str
    conversation_id: str
    onboarding_step: int
    is_onboarding_complete: bool


class MessageOut(_Camel):
    role: str
    content: str
    timestamp: Optional[str] = None


class OnboardingHistory(_Camel):
    conversation_id: Optional[str] = None
    messages: list[MessageOut] = []
    onboarding_step: int = 0
    is_onboarding_complete: bool = False


@onboarding_router.post("", response_model=OnboardingResponse)
async def onboarding_turn(
    request: OnboardingRequest,
    user: AuthenticatedUser = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Send a message (or nothing, on first open) to the onboarding assistant."""
    if request.message is not None:
        check = check_input(request.message, user.tenant_id)
        if not check.allowed:
            raise api_error(status.HTTP_400_BAD_REQUEST, "Invalid message", check.reason)

    try:
        result = await handle_turn(
            "onboarding",
            message=request.message,
            tenant_id=user.tenant_id,
            db=db,
            conversation_id=request.conversation_id,
        )
    except Exception as e:
        raise turn_error(e)

    return OnboardingResponse(
        message=result["message"],
        conversation_id=result["conversationId"],
        onboarding_step=result["onboardingStep"],
        is_onboarding_complete=result["isOnboardingComplete"],
    )


@onboarding_router.get("", response_model=OnboardingHistory)
async def get_onboarding(
    user: AuthenticatedUser = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """The tenant's current onboarding conversation, if any."""
    try:
        tenant = await get_tenant(db, user.tenant_id)
    except Exception as e:
        raise turn_error(e, "Failed to load onboarding")

    convo = await get_active_conversation(db, user.tenant_id, ONBOARDING)
    kernel = await get_kernel(db, user.tenant_id)

    return OnboardingHistory(
        conversation_id=convo.id if convo else None,
        messages=[MessageOut(**m) for m in load_history(convo)] if convo else [],
        onboarding_step=(kernel.onboarding_step or 0) if kernel else 0,
        is_onboarding_complete=bool(tenant.onboarding_complete),
    )


@onboarding_router.delete("/reset")
async def reset_onboarding(
    user: AuthenticatedUser = Depends(require_tenant),
    db: AsyncSession = Depends(get_db),
):
    """Delete onboarding conversations and clear the onboarding flags. Kernel facts stay."""
    try:
        tenant = await get_tenant(db, user.tenant_id)
    except Exception as e:
        raise turn_error(e, "Failed to reset")

    deleted = await delete_conversations(db, user.tenant_id, ONBOARDING)
    tenant.onboarding_complete = False

    kernel = await get_kernel(db, user.tenant_id)
    if kernel:
        kernel.onboarding_step = 0
        kernel.onboarding_complete = False
    await db.flush()

    logger.info("Onboarding reset for tenant %s (%d conversations deleted)", user.tenant_id, deleted)
    return {"success": True}
