"""
Central configuration. All API keys and settings in one place.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Environment ---
    env: str = Field(default="development", alias="ENV")
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")

    # --- Database ---
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data.sqlite",
        alias="DATABASE_URL",
    )

    # --- Auth (JWT) ---
    jwt_secret: str = Field(default="change-me", alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_expire_days: int = Field(default=7, alias="JWT_EXPIRE_DAYS")

    # --- LLM ---
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    aiml_api_key: str = Field(default="", alias="AIML_API_KEY")
    aiml_base_url: str = Field(default="https://api.aimlapi.com/v1", alias="AIML_BASE_URL")
    default_llm_model: str = Field(default="gpt-4o", alias="DEFAULT_LLM_MODEL")
    default_llm_temperature: float = Field(default=0.7, alias="DEFAULT_LLM_TEMPERATURE")
    default_llm_max_tokens: int = Field(default=500, alias="DEFAULT_LLM_MAX_TOKENS")

    # --- Chat context ---
    history_context_limit: int = Field(default=10, alias="HISTORY_CONTEXT_LIMIT")

    # --- Text-to-speech ---
    tts_model: str = Field(default="gpt-4o-mini-tts", alias="TTS_MODEL")

    # --- API ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=5000, alias="API_PORT")
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")


@lru_cache
def get_settings() -> Settings:
    return Settings()
