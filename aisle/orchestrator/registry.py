"""
Agent registry. Register agents, look them up, list them.
"""

import logging
from typing import Optional

from .base_agent import BaseAgent

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Central registry for all agents."""

    def __init__(self):
        self._agents: dict[str, BaseAgent] = {}

    def register(self, agent: BaseAgent) -> None:
        """Register an agent by its name."""
        if agent.name in self._agents:
            logger.warning("Agent '%s' already registered, overwriting", agent.name)
        self._agents[agent.name] = agent
        logger.info("Registered agent: %s (%s)", agent.name, agent.display_name)

    def get(self, name: str) -> Optional[BaseAgent]:
        """Get an agent by name. Returns None if not found."""
        return self._agents.get(name)

    def get_agent_names(self) -> list[str]:
        return list(self._agents.keys())


# ── Global registry ──────────────────────────────────────────────────

_registry: Optional[AgentRegistry] = None


def get_registry() -> AgentRegistry:
    """Get or create the global agent registry."""
    global _registry
    if _registry is None:
        _registry = AgentRegistry()
        _register_agents(_registry)
    return _registry


def _register_agents(registry: AgentRegistry) -> None:
    from ..agents.onboarding.handler import OnboardingAgent
    from ..agents.concierge.handler import ConciergeAgent

    registry.register(OnboardingAgent())
    registry.register(ConciergeAgent())

    logger.info(
        "Agent registry ready: %d agents [%s]",
        len(registry.get_agent_names()),
        ", ".join(registry.get_agent_names()),
    )
