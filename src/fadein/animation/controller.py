"""Entrance controller: fade, slide and scale a child in (or out).

One ProgressDriver feeds four linear tweens (dx, dy, opacity, scale).
Plays can be awaited; the awaitable resolves on a timer computed from the
remaining distance when the play starts, not when the driver settles.
A later play retargets the driver but leaves earlier timers alone, so an
older awaitable may resolve while the child is still moving the other way.
"""

from dataclasses import replace
from typing import Awaitable, Callable, Optional
import asyncio
import logging
import math

from fadein.animation.progress import ProgressDriver
from fadein.animation.tween import Tween
from fadein.animation.types import (
    AnimationConfig,
    ChannelValues,
    EntranceDirection,
    Phase,
)
from fadein.core.scheduler import AsyncioScheduler, Cancellable, Scheduler

logger = logging.getLogger(__name__)


class EntranceController:
    """Owns the progress of one animated child.

    Example:
        controller = EntranceController(AnimationConfig(delay_ms=200), scheduler)
        ...
        await controller.play_backward(dismount=True)
        assert controller.values().erased
    """

    def __init__(
        self,
        config: AnimationConfig | None = None,
        scheduler: Scheduler | None = None,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        if scheduler is None:
            scheduler = AsyncioScheduler()

        self._config = config or AnimationConfig()
        self._scheduler = scheduler
        self._listeners: list[Callable[[], None]] = []
        if on_change:
            self._listeners.append(on_change)

        entering = self._config.direction == EntranceDirection.ENTER
        self._driver = ProgressDriver(
            scheduler,
            duration_ms=self._config.duration_ms,
            value=0.0 if entering else 1.0,
        )
        self._driver.add_listener(self._on_progress)

        self._dx = Tween(self._config.offset.dx, 0.0)
        self._dy = Tween(self._config.offset.dy, 0.0)
        self._opacity = Tween(self._config.opacity, 1.0)
        self._scale = Tween(self._config.scale, 1.0)

        self._erased = False
        self._mounted = True
        self._auto_play: Optional[Cancellable] = None
        # Completion timers of plays still in flight
        self._pending: dict[Cancellable, Optional[asyncio.Future]] = {}

        if self._config.skip_animation:
            logger.debug("Entrance animation skipped")
        else:
            self._auto_play = scheduler.run_after(self._config.delay_ms, self._run_auto_play)
            logger.debug(
                f"Entrance {self._config.direction.name} scheduled "
                f"in {self._config.delay_ms}ms"
            )

    # Read-only state
    @property
    def config(self) -> AnimationConfig:
        return self._config

    @property
    def progress(self) -> float:
        return self._driver.value

    @property
    def phase(self) -> Phase:
        return self._driver.phase

    @property
    def erased(self) -> bool:
        return self._erased

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def is_animating(self) -> bool:
        return self._driver.is_animating

    @property
    def duration_ms(self) -> float:
        return self._driver.duration_ms

    @duration_ms.setter
    def duration_ms(self, value: float) -> None:
        """Retarget the rate of the current and future plays."""
        self._config = replace(self._config, duration_ms=value)
        self._driver.duration_ms = value

    def update_config(self, config: AnimationConfig) -> None:
        """Apply an updated config from the owner. Only duration is live."""
        if config.duration_ms != self._config.duration_ms:
            logger.debug(f"Duration {self._config.duration_ms}ms -> {config.duration_ms}ms")
            self.duration_ms = config.duration_ms

    # Playback
    def play_forward(self, from_: Optional[float] = None) -> Awaitable[None]:
        """Play the entrance. The result can be awaited.

        Args:
            from_: Progress (0.0 - 1.0) to start from; None keeps the current one

        Returns:
            Future resolved ceil((1 - start) * duration) ms from now
        """
        if not self._mounted:
            return _unmounted_play()
        future = asyncio.get_running_loop().create_future()
        self._play(forward=True, from_=from_, dismount=False, future=future)
        return future

    def play_backward(
        self,
        from_: Optional[float] = None,
        dismount: bool = False,
    ) -> Awaitable[None]:
        """Play the exit. The result can be awaited.

        Args:
            from_: Progress (0.0 - 1.0) to start from; None keeps the current one
            dismount: Erase the child once the wait has elapsed

        Returns:
            Future resolved ceil(start * duration) ms from now
        """
        if not self._mounted:
            return _unmounted_play()
        future = asyncio.get_running_loop().create_future()
        self._play(forward=False, from_=from_, dismount=dismount, future=future)
        return future

    # Rendering
    def values(self) -> ChannelValues:
        """Channel values for the current frame."""
        if self._erased:
            return ChannelValues.ERASED
        if self._config.skip_animation:
            return ChannelValues.SETTLED
        return self.values_at(self._driver.value)

    def values_at(self, progress: float) -> ChannelValues:
        """Channel values at an arbitrary progress."""
        return ChannelValues(
            dx=self._dx.transform(progress),
            dy=self._dy.transform(progress),
            opacity=self._opacity.transform(progress),
            scale=self._scale.transform(progress),
        )

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Register a render target to notify on every visual change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def dispose(self) -> None:
        """Tear down: cancel timers, detach the driver. Safe to call twice."""
        if not self._mounted:
            return
        self._mounted = False

        if self._auto_play:
            self._auto_play.cancel()
            self._auto_play = None

        # Awaiters are released now instead of on their timers
        for handle, future in list(self._pending.items()):
            handle.cancel()
            _resolve(future)
        self._pending.clear()

        self._driver.dispose()
        self._listeners.clear()
        logger.debug("EntranceController disposed")

    # Internals
    def _run_auto_play(self) -> None:
        self._auto_play = None
        if self._config.direction == EntranceDirection.ENTER:
            self._play(forward=True, from_=None, dismount=False)
        else:
            self._play(forward=False, from_=None, dismount=self._config.dismount_after_exit)

    def _play(
        self,
        forward: bool,
        from_: Optional[float],
        dismount: bool,
        future: Optional[asyncio.Future] = None,
    ) -> None:
        if not self._mounted:
            logger.debug("FadeIn wasn't mounted")
            _resolve(future)
            return

        if forward and self._erased:
            # Bring the child back before animating it in
            self._erased = False
            self._notify()

        start = self._driver.value if from_ is None else from_
        if forward:
            left = 1.0 - start
            self._driver.forward(from_)
        else:
            left = start
            self._driver.reverse(from_)

        wait_ms = math.ceil(left * self._driver.duration_ms)
        handle: Optional[Cancellable] = None

        def on_elapsed() -> None:
            self._pending.pop(handle, None)
            if dismount:
                self._erase()
            _resolve(future)

        handle = self._scheduler.run_after(wait_ms, on_elapsed)
        self._pending[handle] = future
        logger.debug(f"Play {'forward' if forward else 'backward'} from {start:.3f}, wait {wait_ms}ms")

    def _erase(self) -> None:
        if self._erased:
            return
        self._erased = True
        self._driver.stop()
        logger.debug("Child erased after exit")
        self._notify()

    def _on_progress(self, value: float) -> None:
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Error in render listener: {e}")


def _resolve(future: Optional[asyncio.Future]) -> None:
    if future is not None and not future.done():
        future.set_result(None)


class _Settled:
    """Already-completed awaitable, usable without a running loop."""

    def done(self) -> bool:
        return True

    def __await__(self):
        return iter(())


def _unmounted_play() -> Awaitable[None]:
    logger.debug("FadeIn wasn't mounted")
    try:
        future = asyncio.get_running_loop().create_future()
    except RuntimeError:
        return _Settled()
    future.set_result(None)
    return future
