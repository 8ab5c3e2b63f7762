"""Tests for agent prompts and the agent registry."""

from datetime import date

from aisle.agents.concierge.handler import ConciergeAgent
from aisle.agents.onboarding.handler import FINAL_STEP, OnboardingAgent, current_step
from aisle.models import Tenant
from aisle.orchestrator.base_agent import TurnContext
from aisle.orchestrator.registry import get_registry


def _ctx(kernel=None, history=None, message=None) -> TurnContext:
    return TurnContext(
        tenant=Tenant(id="t1", slug="t1", display_name=""),
        kernel=kernel or {},
        history=history or [],
        message=message,
        today=date(2026, 1, 1),
    )


class TestRegistry:
    def test_both_assistants_registered(self) -> None:
        registry = get_registry()
        assert isinstance(registry.get("onboarding"), OnboardingAgent)
        assert isinstance(registry.get("concierge"), ConciergeAgent)
        assert registry.get("eve") is None


class TestOnboardingAgent:
    def test_step_from_history_length(self) -> None:
        assert current_step([]) == 0
        assert current_step([{}] * 3) == 1
        assert current_step([{}] * 40) == FINAL_STEP

    def test_prompt_carries_step_and_context(self) -> None:
        prompt = OnboardingAgent().build_system_prompt(_ctx(kernel={"names": ["Emma", "James"]}, history=[{}] * 4))
        assert "CURRENT ONBOARDING STEP: 2" in prompt
        assert "Names: Emma & James" in prompt
        assert '"moveToNextStep"' in prompt
        assert "<extract>" in prompt

    def test_empty_kernel_sentinel_in_prompt(self) -> None:
        assert "Nothing yet, this is the start." in OnboardingAgent().build_system_prompt(_ctx())

    def test_returning_instruction_without_names(self) -> None:
        assert OnboardingAgent().returning_instruction(_ctx()).startswith("[The user is back.")


class TestConciergeAgent:
    def test_prompt_sections(self) -> None:
        prompt = ConciergeAgent().build_system_prompt(_ctx(kernel={"vibe": ["rustic"]}))
        assert "TODAY'S DATE: January 1, 2026" in prompt
        assert "Vibe: rustic" in prompt
        assert "THEIR COMMUNICATION STYLE" in prompt
        assert '"moveToNextStep"' not in prompt

    def test_opening_instruction_is_bracketed(self) -> None:
        text = ConciergeAgent().opening_instruction(_ctx())
        assert text.startswith("[") and text.endswith("]")
