"""
Kernel context: render what we know about a couple into the system prompt,
so the assistant never re-asks a known fact.

Fixed order: identity → relationship story → wedding basics → planning
status → concerns. Same kernel + same `today` → same text.
"""

from datetime import date
from typing import Any, Optional

EMPTY_KERNEL_CONTEXT = "Nothing yet, this is the start."

# (field, label) in render order
FIELD_LABELS: list[tuple[str, str]] = [
    # Identity
    ("names", "Names"),
    ("location", "Location"),
    ("occupations", "Jobs"),
    # Relationship story
    ("how_they_met", "How they met"),
    ("how_long_together", "Together for"),
    ("engagement_story", "Engagement"),
    # Wedding basics
    ("wedding_date", "Wedding date"),
    ("guest_count", "Expected guests"),
    ("budget_total", "Budget"),
    ("vibe", "Vibe"),
    ("formality", "Formality"),
    ("color_palette", "Colors"),
    # Planning status
    ("planning_phase", "Planning phase"),
    ("vendors_booked", "Vendors booked"),
    ("decisions", "Decisions"),
    # Concerns
    ("priorities", "Priorities"),
    ("biggest_concern", "Main concern"),
    ("stressors", "Stressors"),
]


def format_cents(cents: int) -> str:
    """12345600 → "$123,456"; 1050 → "$10.50"."""
    dollars, rem = divmod(int(cents), 100)
    if rem:
        return f"${dollars:,}.{rem:02d}"
    return f"${dollars:,}"


def _format_date(value: Any, today: date) -> str:
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    days = (value - today).days
    when = f"{value:%B} {value.day}, {value.year}"
    if days > 0:
        return f"{when} ({days} days away)"
    if days == 0:
        return f"{when} (today)"
    return f"{when} ({-days} days ago)"


def _format_decisions(decisions: dict) -> str:
    parts = []
    for key in sorted(decisions):
        entry = decisions[key] or {}
        flags = [s for s in (entry.get("status"), "locked" if entry.get("locked") else None) if s]
        label = f"{key}: {entry['name']}" if entry.get("name") else key
        parts.append(f"{label} ({', '.join(flags)})" if flags else label)
    return ", ".join(parts)


def _render(field: str, value: Any, today: date) -> Optional[str]:
    if value is None or value == "" or value == [] or value == {}:
        return None
    if field == "names":
        return " & ".join(value)
    if field == "wedding_date":
        return _format_date(value, today)
    # Zero counts and budgets mean "not known yet"
    if field == "guest_count":
        return f"~{value}" if value else None
    if field == "budget_total":
        return format_cents(value) if value else None
    if field == "planning_phase":
        return str(value).replace("_", " ")
    if field == "decisions":
        return _format_decisions(value)
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def build_kernel_context(kernel: Optional[dict], today: Optional[date] = None) -> str:
    """Render every non-empty kernel field as a `Label: value` line."""
    if not kernel:
        return EMPTY_KERNEL_CONTEXT

    today = today or date.today()
    lines = []
    for field, label in FIELD_LABELS:
        rendered = _render(field, kernel.get(field), today)
        if rendered:
            lines.append(f"{label}: {rendered}")

    return "\n".join(lines) if lines else EMPTY_KERNEL_CONTEXT


def build_profile_context(kernel: Optional[dict]) -> str:
    """Turn the learned communication profile into style guidance."""
    kernel = kernel or {}
    profile_keys = ("uses_emojis", "uses_swearing", "message_length", "knowledge_level", "communication_style")
    if all(kernel.get(k) is None for k in profile_keys):
        return "You haven't learned their communication style yet. Start neutral and adapt as you go."

    parts = []
    if kernel.get("uses_emojis"):
        parts.append("They use emojis, so you can too (sparingly).")
    else:
        parts.append("They don't use emojis, so neither should you.")

    if kernel.get("uses_swearing"):
        parts.append("They've used casual swearing, so you can match that energy when appropriate.")
    else:
        parts.append("They haven't sworn, so keep it clean.")

    length = kernel.get("message_length")
    if length == "short":
        parts.append("They prefer short messages. Keep yours concise.")
    elif length == "long":
        parts.append("They write detailed messages. You can be more thorough in responses.")

    level = kernel.get("knowledge_level")
    if level == "beginner":
        parts.append("They're new to wedding planning. Explain concepts when relevant.")
    elif level == "experienced":
        parts.append("They know their way around wedding planning. Don't over-explain.")

    style = kernel.get("communication_style")
    if style == "casual":
        parts.append("They're casual and relaxed. Match that tone.")
    elif style == "formal":
        parts.append("They're more formal. Be professional but still warm.")

    return "\n".join(parts)
