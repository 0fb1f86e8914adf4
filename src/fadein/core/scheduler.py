"""
Scheduling capabilities consumed by the animation controller.

The controller never owns a clock. It receives a Scheduler that can:
    - call a function on every rendering tick while subscribed
    - run a callback once after a delay, with cancellation

Two implementations are provided:
    AsyncioScheduler: wall-clock timing on the running asyncio loop
    ManualScheduler: virtual clock advanced explicitly (headless, tests)
"""

from abc import ABC, abstractmethod
from typing import Callable
import asyncio
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)

# Tick callbacks receive the elapsed time since the previous tick
TickCallback = Callable[[float], None]


class Cancellable(ABC):
    """Handle returned by the scheduler. cancel() is idempotent."""

    @abstractmethod
    def cancel(self) -> None:
        ...

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        ...


class _Subscription(Cancellable):
    """Tick subscription handle."""

    def __init__(self, owner: "Scheduler", callback: TickCallback) -> None:
        self._owner = owner
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._owner._unsubscribe(self)

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class Scheduler(ABC):
    """Time source for animation drivers."""

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []

    @abstractmethod
    def now_ms(self) -> float:
        """Current time in milliseconds."""

    @abstractmethod
    def run_after(self, delay_ms: float, callback: Callable[[], None]) -> Cancellable:
        """Run callback once after delay_ms."""

    def subscribe_to_ticks(self, callback: TickCallback) -> Cancellable:
        """Call callback(delta_ms) on every tick until cancelled."""
        subscription = _Subscription(self, callback)
        self._subscriptions.append(subscription)
        self._on_subscribed()
        return subscription

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _on_subscribed(self) -> None:
        pass

    def _unsubscribe(self, subscription: _Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _dispatch_tick(self, delta_ms: float) -> None:
        # Copy: callbacks may cancel their own subscription
        for subscription in list(self._subscriptions):
            if subscription.cancelled:
                continue
            try:
                subscription.callback(delta_ms)
            except Exception as e:
                logger.error(f"Error in tick callback: {e}")


class _LoopTimer(Cancellable):
    """Wraps an asyncio.TimerHandle."""

    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Wall-clock scheduler on the running asyncio event loop.

    Timers use loop.call_later. A single frame task drives every tick
    subscriber at the target frame rate and exits when the last
    subscriber is gone.
    """

    def __init__(self, fps: int = 60, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__()
        self.fps = fps
        self.frame_time = 1.0 / fps
        self._loop = loop
        self._frame_task: asyncio.Task | None = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> float:
        return self.loop.time() * 1000.0

    def run_after(self, delay_ms: float, callback: Callable[[], None]) -> Cancellable:
        handle = self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)
        return _LoopTimer(handle)

    def _on_subscribed(self) -> None:
        if self._frame_task is None or self._frame_task.done():
            self._frame_task = self.loop.create_task(self._frame_loop())
            logger.debug(f"Frame loop started at {self.fps} fps")

    async def _frame_loop(self) -> None:
        last = self.loop.time()
        while self._subscriptions:
            await asyncio.sleep(self.frame_time)
            now = self.loop.time()
            self._dispatch_tick((now - last) * 1000.0)
            last = now
        logger.debug("Frame loop idle")

    def close(self) -> None:
        """Drop all subscribers and stop the frame task."""
        self._subscriptions.clear()
        if self._frame_task and not self._frame_task.done():
            self._frame_task.cancel()
        self._frame_task = None


class _ManualTimer(Cancellable):
    """Virtual timer. Heap entries are (deadline, seq, timer)."""

    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by advance().

    Time moves in frames of frame_ms. For each frame, tick subscribers are
    called first, then every timer whose deadline has been reached, in
    deadline order.
    """

    def __init__(self, frame_ms: float = 16.0) -> None:
        super().__init__()
        self.frame_ms = frame_ms
        self._now = 0.0
        self._timers: list[tuple[float, int, _ManualTimer]] = []
        self._seq = itertools.count()

    def now_ms(self) -> float:
        return self._now

    def run_after(self, delay_ms: float, callback: Callable[[], None]) -> Cancellable:
        timer = _ManualTimer(self._now + max(0.0, delay_ms), callback)
        heapq.heappush(self._timers, (timer.deadline, next(self._seq), timer))
        return timer

    @property
    def pending_timers(self) -> int:
        """Number of timers not yet fired or cancelled."""
        return sum(1 for _, _, t in self._timers if not t.cancelled)

    def advance(self, ms: float) -> None:
        """Advance the virtual clock by ms, ticking and firing timers."""
        if ms < 0:
            raise ValueError(f"Cannot advance by negative time: {ms}")

        target = self._now + ms
        # Zero-delay timers fire even on advance(0)
        self._fire_due()
        while self._now < target:
            step = min(self.frame_ms, target - self._now)
            self._now += step
            self._dispatch_tick(step)
            self._fire_due()

    def _fire_due(self) -> None:
        while self._timers and self._timers[0][0] <= self._now:
            _, _, timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            try:
                timer.callback()
            except Exception as e:
                logger.error(f"Error in timer callback: {e}")
