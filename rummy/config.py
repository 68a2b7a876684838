"""Application configuration using Pydantic settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    environment: str = Field(default="development", description="Environment")

    # Table Configuration
    hand_size: int = Field(default=10, ge=1, description="Cards dealt per player")
    table_size: int = Field(
        default=4, ge=1, le=4, description="Seats per table; empty seats get bots"
    )
    turn_duration: int = Field(
        default=30, ge=0, description="Seconds per turn (0 disables the countdown)"
    )
    round_over_delay: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds before the next round starts on its own (0 waits for the host)",
    )

    # Bot Configuration
    bot_turn_delay: float = Field(default=1.5, ge=0.0, description="Bot think time")
    bot_meld_min_hand: int = Field(default=6, description="Minimum hand size before a bot melds")
    bot_meld_chance: float = Field(
        default=0.15, ge=0.0, le=1.0, description="Base probability a bot tries to meld"
    )

    # Validation
    max_meld_selection: int = Field(
        default=15, ge=1, description="Largest meld selection searched by the validator"
    )

    # Themed phases
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    anthropic_model: str = Field(
        default="claude-3-haiku-20240307", description="Model used to generate themed phases"
    )
    phase_request_timeout: float = Field(
        default=20.0, gt=0.0, description="Seconds to wait for themed phases"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"


# Global settings instance
settings = Settings()
