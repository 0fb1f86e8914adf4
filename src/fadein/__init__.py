"""fadein - fade, slide and scale entrance animations."""

from fadein.animation import (
    AnimationConfig,
    ChannelValues,
    EntranceController,
    EntranceDirection,
    Offset,
    Phase,
)
from fadein.core import AsyncioScheduler, ManualScheduler, Scheduler

__version__ = "1.4.0"

__all__ = [
    "AnimationConfig",
    "ChannelValues",
    "EntranceController",
    "EntranceDirection",
    "Offset",
    "Phase",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
]
