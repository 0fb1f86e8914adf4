"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fadein.animation.types import AnimationConfig, EntranceDirection, Offset


class AnimationSettings(BaseSettings):
    """Defaults for new entrance animations."""

    model_config = SettingsConfigDict(env_prefix="FADEIN_ANIMATION_", extra="ignore")

    duration_ms: float = Field(default=333.0, gt=0)
    delay_ms: float = Field(default=0.0, ge=0)
    offset_x: float = 0.0
    offset_y: float = 32.0
    opacity: float = 0.0
    scale: float = 0.9

    # Global "animations disabled" switch
    skip_animation: bool = False

    def to_config(self, **overrides: Any) -> AnimationConfig:
        """Build an AnimationConfig from these defaults.

        Args:
            **overrides: AnimationConfig fields to replace

        Returns:
            A new AnimationConfig
        """
        values: dict[str, Any] = {
            "offset": Offset(self.offset_x, self.offset_y),
            "opacity": self.opacity,
            "scale": self.scale,
            "duration_ms": self.duration_ms,
            "delay_ms": self.delay_ms,
            "skip_animation": self.skip_animation,
            "direction": EntranceDirection.ENTER,
        }
        values.update(overrides)
        return AnimationConfig(**values)


class DisplaySettings(BaseSettings):
    """Preview window settings."""

    model_config = SettingsConfigDict(env_prefix="FADEIN_DISPLAY_", extra="ignore")

    # Virtual canvas
    width: int = 160
    height: int = 120
    scale: int = 4

    # Rendering
    fps: int = 60
    background: tuple[int, int, int] = (20, 20, 30)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="FADEIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False
    title: str = "FadeIn Preview"

    # Nested settings
    animation: AnimationSettings = Field(default_factory=AnimationSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
