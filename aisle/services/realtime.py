"""
Realtime notifications. Thin wrapper around core.redis.
Typed event helpers so the chat UI can refresh kernel-backed views.
"""

from ..core import redis as _redis


# ── Chat events ──────────────────────────────────────────────────────

async def chat_completed(tenant_id: str, conversation_id: str, data: dict = None):
    await _redis.notify_conversation(tenant_id, conversation_id, "chat.completed", data)


async def chat_error(tenant_id: str, conversation_id: str, data: dict = None):
    await _redis.notify_conversation(tenant_id, conversation_id, "chat.error", data)


# ── Kernel events ────────────────────────────────────────────────────

async def kernel_updated(tenant_id: str, changed_fields: list[str]):
    await _redis.notify_tenant(tenant_id, "kernel.updated", {"fields": changed_fields})


async def onboarding_completed(tenant_id: str):
    await _redis.notify_tenant(tenant_id, "onboarding.completed", None)
