"""Runtime settings."""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROFILE = "frontier"


class Settings(BaseSettings):
    """Runtime settings from environment or direct initialization."""

    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("GEPA_SELECT_LOG_LEVEL", "log_level"),
    )
    seed: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("GEPA_SELECT_SEED", "seed"),
    )
    profile: str = Field(
        default=DEFAULT_PROFILE,
        validation_alias=AliasChoices("GEPA_SELECT_PROFILE", "profile"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


def get_settings() -> Settings:
    """Load settings from environment."""
    return Settings()
