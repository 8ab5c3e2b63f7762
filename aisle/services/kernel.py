"""
Kernel merger: fold one turn's extraction into the tenant's wedding kernel.

Merge rules per field category:
  scalar      last write wins
  set-like    union, deduplicated case-insensitively (first spelling kept)
  append-only new values appended, nothing removed
  decisions   per-key merge; locked entries are not touched by extraction;
              a booked vendor becomes {"status": "booked", "locked": true}

merge_extraction() is pure and works on plain dicts. apply_extraction()
writes the result to the ORM rows and cascades to the tenant.
"""

import logging
import re
from typing import Any, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from ..models.base import utcnow
from ..models.kernel import WeddingKernel
from ..models.tenant import Tenant
from .extraction import KernelExtraction

logger = logging.getLogger(__name__)

SCALAR_FIELDS = (
    "location",
    "how_they_met",
    "how_long_together",
    "engagement_story",
    "wedding_date",
    "guest_count",
    "budget_total",
    "formality",
    "planning_phase",
    "biggest_concern",
    "uses_emojis",
    "uses_swearing",
    "message_length",
    "knowledge_level",
    "communication_style",
)
SET_FIELDS = ("names", "occupations", "vibe", "color_palette", "priorities", "vendors_booked")
APPEND_FIELDS = ("stressors",)
JSON_FIELDS = SET_FIELDS + APPEND_FIELDS + ("decisions",)

KERNEL_FIELDS = SCALAR_FIELDS + JSON_FIELDS + (
    "onboarding_step",
    "onboarding_complete",
    "last_interaction",
)

BOOKED = "booked"


# ── Pure merge helpers ───────────────────────────────────────────────

def _norm(value: str) -> str:
    return value.strip().casefold()


def union(stored: Optional[Iterable[str]], incoming: Iterable[str]) -> list[str]:
    """Stored values first, then new ones; no duplicates."""
    merged: list[str] = []
    seen: set[str] = set()
    for value in [*(stored or []), *incoming]:
        if not value or not value.strip():
            continue
        key = _norm(value)
        if key not in seen:
            seen.add(key)
            merged.append(value.strip())
    return merged


def append_new(stored: Optional[Iterable[str]], incoming: Iterable[str]) -> list[str]:
    """Keep every stored entry as-is and append unseen incoming ones."""
    merged = list(stored or [])
    seen = {_norm(v) for v in merged if v}
    for value in incoming:
        if value and value.strip() and _norm(value) not in seen:
            seen.add(_norm(value))
            merged.append(value.strip())
    return merged


def decision_key(name: str) -> str:
    """"DJ / Band" → "dj_band"."""
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def merge_decisions(
    stored: Optional[dict],
    incoming: Optional[dict],
    booked: Iterable[str] = (),
) -> dict:
    merged = {k: dict(v or {}) for k, v in (stored or {}).items()}

    for raw_key, entry in (incoming or {}).items():
        key = decision_key(raw_key)
        if not key:
            continue
        existing = merged.get(key, {})
        if existing.get("locked"):
            if any(existing.get(f) != v for f, v in entry.items()):
                logger.info("Decision %s is locked; ignoring extracted change", key)
            continue

        updated = {**existing, **entry}
        updated["locked"] = bool(updated.get("locked")) or updated.get("status") == BOOKED
        if updated["locked"]:
            updated["status"] = entry.get("status") or BOOKED
        elif not updated.get("status"):
            updated["status"] = "decided" if updated.get("name") else "researching"
        merged[key] = updated

    for vendor in booked:
        key = decision_key(vendor)
        if not key or merged.get(key, {}).get("locked"):
            continue
        merged[key] = {**merged.get(key, {}), "status": BOOKED, "locked": True}

    return merged


def merge_extraction(current: dict, extraction: KernelExtraction) -> dict[str, Any]:
    """
    Compute kernel updates for one turn. Returns only fields whose value
    changes; an empty dict means nothing new was learned.
    """
    learned = extraction.learned()
    updates: dict[str, Any] = {}

    for field in SCALAR_FIELDS:
        if field in learned and learned[field] != current.get(field):
            updates[field] = learned[field]

    for field in SET_FIELDS:
        if field in learned:
            merged = union(current.get(field), learned[field])
            if merged != list(current.get(field) or []):
                updates[field] = merged

    for field in APPEND_FIELDS:
        if field in learned:
            merged = append_new(current.get(field), learned[field])
            if merged != list(current.get(field) or []):
                updates[field] = merged

    if "decisions" in learned or "vendors_booked" in learned:
        merged = merge_decisions(
            current.get("decisions"),
            learned.get("decisions"),
            learned.get("vendors_booked", ()),
        )
        if merged != (current.get("decisions") or {}):
            updates["decisions"] = merged

    return updates


# ── Persistence ──────────────────────────────────────────────────────

def kernel_snapshot(kernel: Optional[WeddingKernel]) -> dict[str, Any]:
    """Plain-dict copy of the kernel facts (snake_case keys)."""
    if kernel is None:
        return {}
    return {field: getattr(kernel, field) for field in KERNEL_FIELDS}


async def get_kernel(db: AsyncSession, tenant_id: str) -> Optional[WeddingKernel]:
    result = await db.execute(
        select(WeddingKernel).where(WeddingKernel.tenant_id == tenant_id)
    )
    return result.scalar_one_or_none()


async def get_or_create_kernel(db: AsyncSession, tenant_id: str) -> WeddingKernel:
    """Load the tenant's kernel, creating an empty one on first contact."""
    kernel = await get_kernel(db, tenant_id)
    if kernel is None:
        kernel = WeddingKernel(
            tenant_id=tenant_id,
            names=[],
            occupations=[],
            vibe=[],
            color_palette=[],
            priorities=[],
            stressors=[],
            vendors_booked=[],
            decisions={},
            onboarding_step=0,
            onboarding_complete=False,
        )
        db.add(kernel)
        await db.flush()
        logger.info("Created wedding kernel for tenant %s", tenant_id)
    return kernel


async def apply_extraction(
    db: AsyncSession,
    tenant: Tenant,
    kernel: WeddingKernel,
    extraction: KernelExtraction,
) -> list[str]:
    """
    Merge a turn's extraction into the kernel and cascade to the tenant row.
    Returns the names of kernel fields that changed.
    """
    learned = extraction.learned()
    kernel.last_interaction = utcnow()
    if not learned:
        await db.flush()
        return []

    updates = merge_extraction(kernel_snapshot(kernel), extraction)
    for field, value in updates.items():
        setattr(kernel, field, value)
        if field in JSON_FIELDS:
            flag_modified(kernel, field)

    # Cascades: keep tenant copies in sync for fast reads elsewhere
    names = kernel.names or []
    if "names" in learned and len(names) >= 2:
        display_name = f"{names[0]} & {names[1]}"
        if tenant.display_name != display_name:
            tenant.display_name = display_name
            logger.info("Tenant %s display name → %s", tenant.id, display_name)

    if "wedding_date" in learned:
        tenant.wedding_date = learned["wedding_date"]

    await db.flush()

    if updates:
        logger.info("Kernel %s updated: %s", kernel.id, ", ".join(sorted(updates)))
    return list(updates)
