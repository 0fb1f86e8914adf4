"""Normalized progress driven over time by a scheduler."""

from typing import Callable, Optional
import logging

from fadein.animation.types import Phase
from fadein.core.scheduler import Cancellable, Scheduler

logger = logging.getLogger(__name__)

# Snap to the target when this close, so float accumulation still settles
_SETTLE_EPSILON = 1e-9


class ProgressDriver:
    """Advances a value in [0.0, 1.0] toward 0.0 or 1.0 at 1/duration per ms.

    Only one trajectory exists at a time. Calling forward() or reverse()
    while running retargets the same tick subscription instead of adding
    another one.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        duration_ms: float,
        value: float = 0.0,
    ) -> None:
        self._scheduler = scheduler
        self._duration_ms = duration_ms
        self._value = _clamp(value)
        self._target = self._value
        self._phase = Phase.IDLE
        self._ticker: Optional[Cancellable] = None
        self._listeners: list[Callable[[float], None]] = []
        self._disposed = False

    @property
    def value(self) -> float:
        """Current progress."""
        return self._value

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def target(self) -> float:
        return self._target

    @property
    def is_animating(self) -> bool:
        return self._ticker is not None

    @property
    def duration_ms(self) -> float:
        return self._duration_ms

    @duration_ms.setter
    def duration_ms(self, value: float) -> None:
        # Rate changes on the next tick, the current value stays put
        self._duration_ms = value

    def forward(self, from_: Optional[float] = None) -> None:
        """Drive toward 1.0, optionally jumping to from_ first."""
        self._animate_to(1.0, from_)

    def reverse(self, from_: Optional[float] = None) -> None:
        """Drive toward 0.0, optionally jumping to from_ first."""
        self._animate_to(0.0, from_)

    def stop(self) -> None:
        """Stop driving. The value is left where it is."""
        if self._ticker:
            self._ticker.cancel()
            self._ticker = None
        if self._phase == Phase.RUNNING:
            self._phase = Phase.SETTLED

    def add_listener(self, callback: Callable[[float], None]) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[float], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def dispose(self) -> None:
        """Release the tick subscription and listeners."""
        if self._disposed:
            return
        self.stop()
        self._listeners.clear()
        self._disposed = True

    def _animate_to(self, target: float, from_: Optional[float]) -> None:
        if self._disposed:
            logger.debug("ProgressDriver used after dispose")
            return

        if from_ is not None:
            self._value = _clamp(from_)
        self._target = target
        self._phase = Phase.RUNNING

        if self._value == target or self._duration_ms <= 0:
            self._value = target
            self._settle()
            self._notify()
            return

        if self._ticker is None:
            self._ticker = self._scheduler.subscribe_to_ticks(self._tick)
        self._notify()

    def _tick(self, delta_ms: float) -> None:
        if self._phase != Phase.RUNNING:
            return

        if self._duration_ms <= 0:
            self._value = self._target
        else:
            step = delta_ms / self._duration_ms
            if self._target > self._value:
                self._value = min(self._target, self._value + step)
            else:
                self._value = max(self._target, self._value - step)
            if abs(self._target - self._value) < _SETTLE_EPSILON:
                self._value = self._target

        if self._value == self._target:
            self._settle()
        self._notify()

    def _settle(self) -> None:
        self._phase = Phase.SETTLED
        if self._ticker:
            self._ticker.cancel()
            self._ticker = None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._value)
            except Exception as e:
                logger.error(f"Error in progress listener: {e}")


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))
