from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# DISCOVERY DEFAULTS
# =============================================================================

# Chance that a Favor decision produces a mutual match
DEFAULT_MATCH_PROBABILITY = 0.5

# Simulated fetch latency for the bundled demo profiles
DEFAULT_REFRESH_DELAY_SECONDS = 0.5

# Request timeout for the HTTP candidate source
DEFAULT_SOURCE_TIMEOUT_SECONDS = 10.0


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="VIBEWAVE_")

    app_name: str = "VibeWave Discovery"
    debug: bool = False
    log_level: str = "INFO"

    match_probability: float = Field(default=DEFAULT_MATCH_PROBABILITY, ge=0.0, le=1.0)

    # Seed for shuffling and match trials; None draws from system entropy
    random_seed: int | None = None

    # Where candidate profiles come from: bundled demo data or a remote service
    candidate_source: Literal["demo", "http"] = "demo"
    candidate_source_url: str = ""
    candidate_source_timeout: float = Field(default=DEFAULT_SOURCE_TIMEOUT_SECONDS, gt=0)
    refresh_delay_seconds: float = Field(default=DEFAULT_REFRESH_DELAY_SECONDS, ge=0)


settings = Settings()
