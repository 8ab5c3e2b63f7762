"""Tests for rendering the kernel into prompt context."""

from datetime import date

from aisle.services.kernel_context import (
    EMPTY_KERNEL_CONTEXT,
    FIELD_LABELS,
    build_kernel_context,
    build_profile_context,
    format_cents,
)

TODAY = date(2026, 1, 1)


class TestBuildKernelContext:
    def test_none_is_sentinel(self) -> None:
        assert build_kernel_context(None) == EMPTY_KERNEL_CONTEXT

    def test_all_empty_is_sentinel(self) -> None:
        kernel = {"names": [], "vibe": [], "decisions": {}, "location": None, "onboarding_step": 0}
        assert build_kernel_context(kernel, today=TODAY) == EMPTY_KERNEL_CONTEXT

    def test_zero_count_and_budget_are_unknown(self) -> None:
        assert build_kernel_context({"guest_count": 0, "budget_total": 0}, today=TODAY) == EMPTY_KERNEL_CONTEXT
        rendered = build_kernel_context({"guest_count": 0, "location": "Provo, UT"}, today=TODAY)
        assert "Expected guests" not in rendered
        assert "Provo, UT" in rendered

    def test_populated_fields_labelled(self) -> None:
        kernel = {
            "names": ["Emma", "James"],
            "wedding_date": date(2026, 6, 14),
            "guest_count": 120,
            "budget_total": 3_000_000,
            "vibe": ["rustic", "elegant"],
        }
        text = build_kernel_context(kernel, today=TODAY)
        assert "Names: Emma & James" in text
        assert "Wedding date: June 14, 2026 (164 days away)" in text
        assert "Expected guests: ~120" in text
        assert "Budget: $30,000" in text
        assert "Vibe: rustic, elegant" in text

    def test_every_label_appears_when_set(self) -> None:
        values = {
            "names": ["A", "B"],
            "wedding_date": "2026-06-14",
            "guest_count": 10,
            "budget_total": 100,
            "planning_phase": "week_of",
            "decisions": {"venue": {"name": "Barn", "status": "booked", "locked": True}},
        }
        kernel = {field: values.get(field, ["x"] if field in ("occupations", "vibe", "color_palette",
                  "vendors_booked", "priorities", "stressors") else "x") for field, _ in FIELD_LABELS}
        text = build_kernel_context(kernel, today=TODAY)
        for _, label in FIELD_LABELS:
            assert f"{label}:" in text

    def test_order_is_fixed(self) -> None:
        kernel = {"stressors": ["family"], "names": ["Emma", "James"], "location": "Provo"}
        lines = build_kernel_context(kernel, today=TODAY).splitlines()
        assert lines == ["Names: Emma & James", "Location: Provo", "Stressors: family"]

    def test_deterministic(self) -> None:
        kernel = {"names": ["Emma", "James"], "vibe": ["rustic"]}
        assert build_kernel_context(kernel, today=TODAY) == build_kernel_context(dict(kernel), today=TODAY)

    def test_decisions_rendered(self) -> None:
        kernel = {"decisions": {"venue": {"name": "Sundance", "status": "booked", "locked": True}}}
        assert "Decisions: venue: Sundance (booked, locked)" in build_kernel_context(kernel, today=TODAY)

    def test_past_date(self) -> None:
        text = build_kernel_context({"wedding_date": date(2025, 12, 30)}, today=TODAY)
        assert "(2 days ago)" in text


class TestFormatCents:
    def test_whole_dollars(self) -> None:
        assert format_cents(12_345_600) == "$123,456"

    def test_with_cents(self) -> None:
        assert format_cents(1050) == "$10.50"


class TestProfileContext:
    def test_unknown_profile_is_neutral(self) -> None:
        assert "Start neutral" in build_profile_context({})

    def test_emoji_user(self) -> None:
        text = build_profile_context({"uses_emojis": True, "message_length": "short"})
        assert "They use emojis" in text
        assert "concise" in text
