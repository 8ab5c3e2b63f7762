"""
Central feature flags. One file controls every external dependency.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the system uses a local/mock fallback. Nothing crashes.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Auth ─────────────────────────────────────────────────────────
    use_auth0: bool = Field(default=True, alias="FF_USE_AUTH0")
    # ON  → JWT validated via Auth0 JWKS. Needs AUTH0_DOMAIN, AUTH0_AUDIENCE.
    # OFF → Dev user injected (tenant_id="dev-tenant"). No token needed.

    # ── Realtime ─────────────────────────────────────────────────────
    use_redis: bool = Field(default=True, alias="FF_USE_REDIS")
    # ON  → Redis pub/sub for kernel/chat events. Needs REDIS_URL.
    # OFF → Notifications silently skipped. Nothing breaks.

    # ── LLM Provider ─────────────────────────────────────────────────
    llm_provider: str = Field(default="anthropic", alias="FF_LLM_PROVIDER")
    # "anthropic" → Anthropic Messages API (default). Needs ANTHROPIC_API_KEY.
    # "openai"    → OpenAI chat completions. Needs OPENAI_API_KEY.
    # "gemini"    → Gemini OpenAI-compatible endpoint. Needs GEMINI_API_KEY.

    # ── AI allowance ─────────────────────────────────────────────────
    enforce_ai_limit: bool = Field(default=True, alias="FF_ENFORCE_AI_LIMIT")
    # ON  → Free-plan tenants capped at FREE_AI_MESSAGE_LIMIT concierge messages.
    # OFF → Everyone unlimited.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
