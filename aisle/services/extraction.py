"""
Extraction parser.

The assistant appends what it just learned as JSON inside <extract>...</extract>.
parse_reply() strips that block from the text the couple sees and validates
its contents against KernelExtraction. A broken block never fails the turn:
it is logged and treated as "nothing learned".
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


_BLOCK_RE = re.compile(r"<extract>(.*?)</extract>", re.DOTALL | re.IGNORECASE)
_UNTERMINATED_RE = re.compile(r"<extract>.*\Z", re.DOTALL | re.IGNORECASE)
_FENCE_RE = re.compile(r"```(?:json)?\s*|```")


# ── Schema ───────────────────────────────────────────────────────────

class DecisionExtraction(BaseModel):
    """One entry of the decisions map as the assistant reports it."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    status: Optional[str] = None
    locked: Optional[bool] = None
    notes: Optional[str] = None


class KernelExtraction(BaseModel):
    """
    Everything a single assistant turn may report. Wire keys are camelCase
    (weddingDate, budgetTotal, ...); attributes are snake_case.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Identity
    names: Optional[list[str]] = None
    location: Optional[str] = None
    occupations: Optional[list[str]] = None
    # Relationship story
    how_they_met: Optional[str] = None
    how_long_together: Optional[str] = None
    engagement_story: Optional[str] = None
    # Wedding basics
    wedding_date: Optional[date] = None
    guest_count: Optional[int] = Field(default=None, ge=0, le=100_000)
    budget_total: Optional[int] = Field(default=None, ge=0)  # cents
    vibe: Optional[list[str]] = None
    formality: Optional[str] = None
    color_palette: Optional[list[str]] = None
    # Planning status
    planning_phase: Optional[Literal["dreaming", "early", "mid", "final", "week_of", "post"]] = None
    decisions: Optional[dict[str, DecisionExtraction]] = None
    vendors_booked: Optional[list[str]] = None
    # Concerns
    priorities: Optional[list[str]] = None
    biggest_concern: Optional[str] = None
    stressors: Optional[list[str]] = None
    # Communication profile
    uses_emojis: Optional[bool] = None
    uses_swearing: Optional[bool] = None
    message_length: Optional[Literal["short", "medium", "long"]] = None
    knowledge_level: Optional[Literal["beginner", "intermediate", "experienced"]] = None
    communication_style: Optional[Literal["casual", "balanced", "formal"]] = None
    # Onboarding control flag, not a kernel fact
    move_to_next_step: Optional[bool] = None

    @field_validator("wedding_date", mode="before")
    @classmethod
    def _parse_wedding_date(cls, value: Any) -> Any:
        # "2026-06-14T00:00:00Z" → date part; "2026-06" → first of the month
        if isinstance(value, str):
            value = value.strip()
            if re.fullmatch(r"\d{4}-\d{2}", value):
                return f"{value}-01"
            if "T" in value:
                return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        return value

    @field_validator(
        "names", "occupations", "vibe", "color_palette",
        "vendors_booked", "priorities", "stressors",
        mode="before",
    )
    @classmethod
    def _coerce_string_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator(
        "names", "occupations", "vibe", "color_palette",
        "vendors_booked", "priorities", "stressors",
    )
    @classmethod
    def _strip_items(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        if value is None:
            return None
        return [item.strip() for item in value if item and item.strip()]

    def learned(self) -> dict[str, Any]:
        """Fields explicitly present and non-null, snake_case keys."""
        return self.model_dump(exclude_none=True, exclude={"move_to_next_step"})

    @property
    def is_empty(self) -> bool:
        return not self.learned()


_ALIAS_TO_NAME = {
    (info.alias or name): name for name, info in KernelExtraction.model_fields.items()
}


def validate_extraction(raw: Any) -> KernelExtraction:
    """
    Validate a parsed JSON object. Fields that fail validation are dropped
    (and logged) one by one; the rest survive.
    """
    if not isinstance(raw, dict):
        logger.warning("Extraction is not a JSON object (got %s)", type(raw).__name__)
        return KernelExtraction()

    data = dict(raw)
    while True:
        try:
            return KernelExtraction.model_validate(data)
        except ValidationError as e:
            bad_keys = set()
            for err in e.errors():
                loc = err["loc"][0] if err.get("loc") else None
                if loc in data:
                    bad_keys.add(loc)
                elif _ALIAS_TO_NAME.get(loc) in data:
                    bad_keys.add(_ALIAS_TO_NAME[loc])
            if not bad_keys:
                logger.warning("Extraction rejected: %s", e)
                return KernelExtraction()
            for key in bad_keys:
                logger.warning("Dropping invalid extraction field %s=%r", key, data[key])
                data.pop(key)


# ── Parser ───────────────────────────────────────────────────────────

@dataclass
class ParsedReply:
    reply: str
    extraction: KernelExtraction = field(default_factory=KernelExtraction)
    had_block: bool = False


def _loads_block(body: str) -> Any:
    """Parse the block interior, tolerating markdown code fences."""
    text = _FENCE_RE.sub("", body).strip()
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        # Prose around the object: take the outermost {...}
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise
        return json.loads(text[start:end + 1])


def parse_reply(text: str) -> ParsedReply:
    """
    Split an assistant reply into the user-visible text and the extraction.

    No block → text unchanged, empty extraction.
    Malformed block → block removed, empty extraction, warning logged.
    Several blocks → all removed, their objects merged in order.
    """
    text = text or ""
    bodies = _BLOCK_RE.findall(text)

    if not bodies:
        if _UNTERMINATED_RE.search(text):
            logger.warning("Unterminated extraction block; discarding it")
            return ParsedReply(reply=_UNTERMINATED_RE.sub("", text).strip(), had_block=True)
        return ParsedReply(reply=text)

    reply = _BLOCK_RE.sub("", text).strip()
    if len(bodies) > 1:
        logger.warning("Reply has %d extraction blocks; merging them in order", len(bodies))

    # Later blocks win on key collisions
    raw: dict = {}
    for body in bodies:
        try:
            block = _loads_block(body)
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse extraction: %s", e)
            continue
        if not isinstance(block, dict):
            logger.warning("Extraction is not a JSON object (got %s)", type(block).__name__)
            continue
        raw.update(block)

    return ParsedReply(reply=reply, extraction=validate_extraction(raw), had_block=True)
