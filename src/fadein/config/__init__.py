"""Settings for fadein."""

from .settings import AnimationSettings, DisplaySettings, Settings, get_settings

__all__ = ["AnimationSettings", "DisplaySettings", "Settings", "get_settings"]
