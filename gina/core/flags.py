"""
Central feature flags. One file controls every optional behaviour.

Set via environment variables (prefix FF_) or .env file.
When a flag is OFF, the turn still completes. Nothing crashes.
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

    # ── Memory enrichment ────────────────────────────────────────────
    use_fact_extraction: bool = Field(default=True, alias="FF_USE_FACT_EXTRACTION")
    # ON  → after each authenticated turn, a second completion pulls stable
    #       personal facts out of the user message and merges them into memory.
    # OFF → facts only change through /memories and /intake.

    use_running_summary: bool = Field(default=True, alias="FF_USE_RUNNING_SUMMARY")
    # ON  → a third completion rewrites the 2-4 sentence conversation summary.
    # OFF → summary stays whatever it was.

    # ── Reply post-processing ────────────────────────────────────────
    use_resource_formatting: bool = Field(default=True, alias="FF_USE_RESOURCE_FORMATTING")
    # ON  → bullet resource lists in replies are rebuilt into the display format.
    # OFF → replies are returned exactly as the model wrote them.

    # ── Text-to-speech ───────────────────────────────────────────────
    use_tts: bool = Field(default=True, alias="FF_USE_TTS")
    # ON  → /v1/tts proxies to the provider's speech endpoint. Needs OPENAI_API_KEY.
    # OFF → /v1/tts answers 503.

    # ── LLM Provider ─────────────────────────────────────────────────
    llm_provider: str = Field(default="openai", alias="FF_LLM_PROVIDER")
    # "openai" → Direct OpenAI (default). Needs OPENAI_API_KEY.
    # "aiml"   → AIML API proxy. Needs AIML_API_KEY.


@lru_cache
def get_flags() -> FeatureFlags:
    return FeatureFlags()
