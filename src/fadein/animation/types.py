"""Value types shared by the entrance animation components."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar


class EntranceDirection(Enum):
    """Which way the automatic first play runs."""

    ENTER = auto()  # progress 0.0 -> 1.0
    EXIT = auto()   # progress 1.0 -> 0.0


class Phase(Enum):
    """Progress driver phase."""

    IDLE = auto()
    RUNNING = auto()
    SETTLED = auto()


@dataclass(frozen=True)
class Offset:
    """A 2D displacement in pixels."""

    dx: float = 0.0
    dy: float = 0.0

    ZERO: ClassVar["Offset"]


Offset.ZERO = Offset(0.0, 0.0)


@dataclass(frozen=True)
class AnimationConfig:
    """Entrance animation configuration.

    Attributes:
        offset: Starting offset, animated toward (0, 0)
        opacity: Starting opacity, animated toward 1.0
        scale: Starting scale, animated toward 1.0
        duration_ms: Time to traverse progress 0 -> 1 (or 1 -> 0)
        delay_ms: Wait before the automatic first play
        skip_animation: Render the settled child immediately, no timers
        direction: ENTER plays forward from 0.0, EXIT plays backward from 1.0
        dismount_after_exit: Erase the child once an EXIT auto-play settles

    Values are taken as given. An opacity above 1.0 or a negative scale
    simply interpolates through out-of-range values.
    """

    offset: Offset = field(default_factory=lambda: Offset(0.0, 32.0))
    opacity: float = 0.0
    scale: float = 0.9
    duration_ms: float = 333.0
    delay_ms: float = 0.0
    skip_animation: bool = False
    direction: EntranceDirection = EntranceDirection.ENTER
    dismount_after_exit: bool = False


@dataclass(frozen=True)
class ChannelValues:
    """Interpolated channel values consumed by the render step."""

    dx: float
    dy: float
    opacity: float
    scale: float
    erased: bool = False

    SETTLED: ClassVar["ChannelValues"]
    ERASED: ClassVar["ChannelValues"]

    @property
    def offset(self) -> Offset:
        return Offset(self.dx, self.dy)


ChannelValues.SETTLED = ChannelValues(dx=0.0, dy=0.0, opacity=1.0, scale=1.0)
# Zero-size placeholder
ChannelValues.ERASED = ChannelValues(dx=0.0, dy=0.0, opacity=0.0, scale=0.0, erased=True)
