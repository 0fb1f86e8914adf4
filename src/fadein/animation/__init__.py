"""Animation module for fadein."""

from fadein.animation.tween import Tween, lerp
from fadein.animation.types import (
    AnimationConfig,
    ChannelValues,
    EntranceDirection,
    Offset,
    Phase,
)
from fadein.animation.progress import ProgressDriver
from fadein.animation.controller import EntranceController

__all__ = [
    # Tweens
    "Tween",
    "lerp",
    # Types
    "AnimationConfig",
    "ChannelValues",
    "EntranceDirection",
    "Offset",
    "Phase",
    # Driving
    "ProgressDriver",
    "EntranceController",
]
