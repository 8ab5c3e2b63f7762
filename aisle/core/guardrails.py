"""
Guardrails: input/output validation around the chat pipeline.

Layers:
  1. Input validation (length, empty)
  2. Prompt-injection logging (never blocks)
  3. Output validation (length, leaked extraction tags)
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# ── Configuration ─────────────────────────────────────────────────────

MAX_MESSAGE_LENGTH = 4000        # Max input message length
MAX_RESPONSE_LENGTH = 8000       # Max reply length shown to the couple

_INJECTION_PATTERNS = [
    re.compile(r"ignore\s+(all\s+)?previous\s+instructions"),
    re.compile(r"disregard\s+(all\s+)?previous"),
    re.compile(r"<\s*/?\s*extract\s*>"),
    re.compile(r"<\s*system\s*>"),
]


@dataclass
class GuardrailResult:
    """Result of a guardrail check."""
    allowed: bool
    reason: Optional[str] = None
    modified: Optional[str] = None


# ── Input Guardrails ──────────────────────────────────────────────────

def check_input(message: str, tenant_id: str = "") -> GuardrailResult:
    """
    Validate user input before processing.
    Returns GuardrailResult with allowed=False if blocked.
    """
    if len(message) > MAX_MESSAGE_LENGTH:
        return GuardrailResult(
            allowed=False,
            reason=f"Message too long ({len(message)} chars). Maximum is {MAX_MESSAGE_LENGTH}.",
        )

    if not message.strip():
        return GuardrailResult(allowed=False, reason="Message is empty.")

    msg_lower = message.lower()
    for pattern in _INJECTION_PATTERNS:
        if pattern.search(msg_lower):
            # Logged, not blocked
            logger.warning("Potential injection from tenant=%s: %s", tenant_id, message[:100])
            break

    return GuardrailResult(allowed=True)


# ── Output Guardrails ─────────────────────────────────────────────────

def check_output(reply: str) -> GuardrailResult:
    """Validate the assistant reply before sending it to the couple."""
    if len(reply) > MAX_RESPONSE_LENGTH:
        return GuardrailResult(
            allowed=True,
            modified=reply[:MAX_RESPONSE_LENGTH].rstrip() + "...",
        )

    if "<extract" in reply or "</extract>" in reply:
        logger.warning("Extraction tag leaked into reply")

    return GuardrailResult(allowed=True)
