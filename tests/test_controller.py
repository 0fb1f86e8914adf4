"""
Tests for EntranceController.

Time is driven by ManualScheduler, so every timing assertion is exact:
ticks run before timers within a frame, and futures returned by the play
operations are resolved synchronously by the timer callback.
TestWallClock is the exception and runs on AsyncioScheduler.
"""

import asyncio
import logging

import pytest

from fadein.animation.controller import EntranceController
from fadein.animation.types import (
    AnimationConfig,
    ChannelValues,
    EntranceDirection,
    Offset,
    Phase,
)
from fadein.core.scheduler import AsyncioScheduler

# Long enough that the automatic play never interferes with manual plays
NO_AUTO_PLAY = 60_000.0


def manual(scheduler, on_change=None, **overrides):
    """Controller whose automatic play is pushed far into the future."""
    overrides.setdefault("delay_ms", NO_AUTO_PLAY)
    return EntranceController(AnimationConfig(**overrides), scheduler, on_change=on_change)


class TestConstruction:
    """Initial state and the automatic play."""

    def test_enter_starts_at_zero(self, scheduler, config):
        controller = EntranceController(config, scheduler)

        assert controller.progress == 0.0
        assert controller.phase == Phase.IDLE
        assert controller.erased is False
        assert controller.mounted is True
        assert scheduler.pending_timers == 1

    def test_exit_starts_at_one(self, scheduler):
        controller = EntranceController(
            AnimationConfig(direction=EntranceDirection.EXIT), scheduler
        )
        assert controller.progress == 1.0
        assert controller.values() == ChannelValues.SETTLED

    def test_zero_delay_plays_on_next_turn(self, scheduler, config):
        controller = EntranceController(config, scheduler)

        scheduler.advance(0)
        assert controller.phase == Phase.RUNNING

        scheduler.advance(333)
        assert controller.progress == 1.0
        assert controller.phase == Phase.SETTLED
        assert scheduler.subscriber_count == 0

    def test_delay_postpones_auto_play(self, scheduler):
        controller = EntranceController(AnimationConfig(delay_ms=500), scheduler)

        scheduler.advance(499)
        assert controller.phase == Phase.IDLE
        assert controller.progress == 0.0

        scheduler.advance(1)
        assert controller.phase == Phase.RUNNING

    def test_exit_auto_play_dismounts(self, scheduler, changes):
        controller = EntranceController(
            AnimationConfig(direction=EntranceDirection.EXIT, dismount_after_exit=True),
            scheduler,
            on_change=changes,
        )

        scheduler.advance(0)
        scheduler.advance(333)

        assert controller.progress == 0.0
        assert controller.erased is True
        assert controller.values() == ChannelValues.ERASED
        assert changes.received

    def test_exit_auto_play_without_dismount_keeps_child(self, scheduler):
        controller = EntranceController(
            AnimationConfig(direction=EntranceDirection.EXIT), scheduler
        )

        scheduler.advance(0)
        scheduler.advance(400)

        assert controller.progress == 0.0
        assert controller.erased is False
        assert controller.values().opacity == 0.0


class TestRenderValues:
    """Channel derivation from progress."""

    def test_start_values(self, scheduler):
        controller = manual(scheduler, offset=Offset(10.0, 32.0), opacity=0.2, scale=0.9)

        values = controller.values_at(0.0)
        assert values == ChannelValues(dx=10.0, dy=32.0, opacity=0.2, scale=0.9)
        assert controller.values() == values

    def test_end_values(self, scheduler):
        controller = manual(scheduler, offset=Offset(10.0, 32.0), opacity=0.2, scale=0.9)
        assert controller.values_at(1.0) == ChannelValues.SETTLED

    def test_midpoint_is_linear(self, scheduler):
        controller = manual(scheduler)

        values = controller.values_at(0.5)
        assert values.dx == pytest.approx(0.0)
        assert values.dy == pytest.approx(16.0)
        assert values.opacity == pytest.approx(0.5)
        assert values.scale == pytest.approx(0.95)

    def test_out_of_range_values_are_not_clamped(self, scheduler):
        controller = manual(scheduler, opacity=2.0, scale=-1.0)

        values = controller.values_at(0.5)
        assert values.opacity == pytest.approx(1.5)
        assert values.scale == pytest.approx(0.0)

    def test_skip_animation_is_settled_without_timers(self, scheduler):
        controller = EntranceController(
            AnimationConfig(delay_ms=500, skip_animation=True), scheduler
        )

        assert scheduler.pending_timers == 0
        assert scheduler.subscriber_count == 0
        assert controller.values() == ChannelValues(dx=0.0, dy=0.0, opacity=1.0, scale=1.0)

        scheduler.advance(1000)
        assert scheduler.pending_timers == 0
        assert controller.values() == ChannelValues.SETTLED

    @pytest.mark.asyncio
    async def test_skip_animation_still_erases_on_dismount(self, scheduler):
        controller = EntranceController(AnimationConfig(skip_animation=True), scheduler)

        future = controller.play_backward(1.0, dismount=True)
        scheduler.advance(400)

        assert future.done()
        assert controller.erased is True
        assert controller.values() == ChannelValues.ERASED


class TestPlayForward:
    """Awaitable forward play."""

    @pytest.mark.asyncio
    async def test_resolves_after_duration(self, scheduler):
        controller = manual(scheduler)

        future = controller.play_forward()
        assert controller.phase == Phase.RUNNING

        scheduler.advance(332)
        assert not future.done()
        assert controller.progress < 1.0

        scheduler.advance(1)
        assert future.done()
        assert controller.progress == 1.0
        assert controller.phase == Phase.SETTLED

        await future

    @pytest.mark.asyncio
    async def test_wait_is_rounded_up(self, scheduler):
        controller = manual(scheduler)

        # (1.0 - 0.5) * 333 = 166.5 -> 167
        future = controller.play_forward(0.5)
        assert controller.progress == 0.5

        scheduler.advance(166)
        assert not future.done()
        scheduler.advance(1)
        assert future.done()

    @pytest.mark.asyncio
    async def test_from_settled_resolves_immediately(self, scheduler):
        controller = manual(scheduler)
        controller.play_forward(1.0)

        future = controller.play_forward()
        scheduler.advance(0)
        assert future.done()

    @pytest.mark.asyncio
    async def test_notifies_on_every_tick(self, scheduler, changes):
        controller = manual(scheduler, on_change=changes)

        controller.play_forward()
        count = len(changes.received)
        scheduler.advance(48)

        assert len(changes.received) == count + 3

    @pytest.mark.asyncio
    async def test_clears_erased(self, scheduler, changes):
        controller = manual(scheduler, on_change=changes, direction=EntranceDirection.EXIT)
        controller.play_backward(dismount=True)
        scheduler.advance(333)
        assert controller.erased is True

        changes.received.clear()
        future = controller.play_forward()

        assert controller.erased is False
        assert changes.received
        assert not controller.values().erased

        scheduler.advance(333)
        assert future.done()
        assert controller.values() == ChannelValues.SETTLED


class TestPlayBackward:
    """Awaitable backward play and dismount."""

    @pytest.mark.asyncio
    async def test_dismount_erases_after_wait(self, scheduler, changes):
        controller = manual(scheduler, on_change=changes, direction=EntranceDirection.EXIT)

        future = controller.play_backward(dismount=True)
        scheduler.advance(332)
        assert not future.done()
        assert controller.erased is False

        scheduler.advance(1)
        assert future.done()
        assert controller.progress == 0.0
        assert controller.erased is True
        assert controller.values() == ChannelValues.ERASED

        await future

    @pytest.mark.asyncio
    async def test_without_dismount_keeps_rendering(self, scheduler):
        controller = manual(scheduler, direction=EntranceDirection.EXIT)

        future = controller.play_backward()
        scheduler.advance(333)

        assert future.done()
        assert controller.erased is False
        assert controller.values() == controller.values_at(0.0)

    @pytest.mark.asyncio
    async def test_wait_uses_given_start(self, scheduler):
        controller = manual(scheduler)

        # 0.25 * 333 = 83.25 -> 84
        future = controller.play_backward(0.25)
        scheduler.advance(83)
        assert not future.done()
        scheduler.advance(1)
        assert future.done()

    @pytest.mark.asyncio
    async def test_erased_stays_until_forward_play(self, scheduler):
        controller = manual(scheduler, direction=EntranceDirection.EXIT)
        controller.play_backward(dismount=True)
        scheduler.advance(333)

        controller.play_backward(1.0)
        scheduler.advance(100)

        assert controller.erased is True
        assert controller.values() == ChannelValues.ERASED


class TestSupersede:
    """A new play retargets progress but never cancels older timers."""

    @pytest.mark.asyncio
    async def test_backward_supersedes_forward(self, scheduler):
        controller = manual(scheduler)

        first = controller.play_forward()
        second = controller.play_backward(0.5)
        assert controller.progress == 0.5
        assert scheduler.subscriber_count == 1

        scheduler.advance(100)
        assert controller.progress == pytest.approx(0.5 - 100 / 333)
        assert not first.done()
        assert not second.done()

        # ceil(0.5 * 333) = 167
        scheduler.advance(67)
        assert second.done()
        assert controller.progress == 0.0
        assert not first.done()

        # The first play still resolves on its original schedule
        scheduler.advance(166)
        assert first.done()
        assert controller.progress == 0.0

    @pytest.mark.asyncio
    async def test_repeated_forward_does_not_stack(self, scheduler):
        controller = manual(scheduler)

        controller.play_forward()
        scheduler.advance(160)
        controller.play_forward()

        assert scheduler.subscriber_count == 1
        scheduler.advance(16)
        assert controller.progress == pytest.approx(176 / 333)


class TestReconfigure:
    """Duration changes retarget the rate only."""

    @pytest.mark.asyncio
    async def test_duration_change_keeps_progress(self, scheduler):
        controller = manual(scheduler)
        controller.play_forward()
        scheduler.advance(96)
        before = controller.progress

        controller.duration_ms = 666
        assert controller.progress == before
        assert controller.phase == Phase.RUNNING

        scheduler.advance(16)
        assert controller.progress == pytest.approx(before + 16 / 666)

    @pytest.mark.asyncio
    async def test_duration_change_keeps_computed_wait(self, scheduler):
        controller = manual(scheduler)
        future = controller.play_forward()

        controller.duration_ms = 1000
        scheduler.advance(333)

        assert future.done()
        assert controller.progress < 1.0

    def test_update_config_applies_duration_only(self, scheduler):
        controller = manual(scheduler)

        controller.update_config(AnimationConfig(duration_ms=500, opacity=0.5))

        assert controller.duration_ms == 500
        assert controller.config.duration_ms == 500
        assert controller.config.opacity == 0.0
        assert controller.values_at(0.0).opacity == 0.0


class TestTeardown:
    """dispose() cancels timers and detaches the driver."""

    def test_cancels_pending_auto_play(self, scheduler, changes):
        controller = EntranceController(AnimationConfig(delay_ms=500), scheduler, on_change=changes)

        scheduler.advance(200)
        controller.dispose()
        scheduler.advance(1000)

        assert controller.progress == 0.0
        assert controller.phase == Phase.IDLE
        assert scheduler.pending_timers == 0
        assert changes.received == []

    def test_is_idempotent(self, scheduler, config):
        controller = EntranceController(config, scheduler)

        controller.dispose()
        controller.dispose()

        assert controller.mounted is False

    @pytest.mark.asyncio
    async def test_releases_running_play(self, scheduler):
        controller = manual(scheduler)
        future = controller.play_forward()
        scheduler.advance(100)
        progress = controller.progress

        controller.dispose()

        assert future.done()
        assert scheduler.subscriber_count == 0
        scheduler.advance(500)
        assert controller.progress == progress

    @pytest.mark.asyncio
    async def test_dismount_never_happens_after_dispose(self, scheduler):
        controller = manual(scheduler, direction=EntranceDirection.EXIT)
        controller.play_backward(dismount=True)

        controller.dispose()
        scheduler.advance(500)

        assert controller.erased is False

    @pytest.mark.asyncio
    async def test_play_when_unmounted_is_noop(self, scheduler, caplog):
        caplog.set_level(logging.DEBUG, logger="fadein.animation.controller")
        controller = manual(scheduler)
        controller.dispose()

        future = controller.play_forward()
        backward = controller.play_backward(dismount=True)

        assert future.done()
        assert backward.done()
        assert controller.progress == 0.0
        assert controller.erased is False
        assert scheduler.pending_timers == 0
        assert "wasn't mounted" in caplog.text

    def test_play_when_unmounted_outside_loop(self, scheduler, caplog):
        caplog.set_level(logging.DEBUG, logger="fadein.animation.controller")
        controller = manual(scheduler)
        controller.dispose()

        forward = controller.play_forward()
        backward = controller.play_backward(0.5, dismount=True)

        assert forward.done()
        assert backward.done()
        assert controller.progress == 0.0
        assert controller.erased is False
        assert scheduler.pending_timers == 0
        assert "wasn't mounted" in caplog.text

    def test_unmounted_play_can_be_awaited(self, scheduler):
        controller = manual(scheduler)
        controller.dispose()

        async def play():
            await controller.play_forward()
            await controller.play_backward()
            return True

        assert asyncio.run(play()) is True


class TestListeners:
    """Render target notification."""

    @pytest.mark.asyncio
    async def test_listener_errors_are_logged(self, scheduler, caplog):
        controller = manual(scheduler)

        def broken():
            raise RuntimeError("boom")

        controller.add_listener(broken)
        controller.play_forward()
        scheduler.advance(16)

        assert "boom" in caplog.text
        assert controller.progress > 0.0

    @pytest.mark.asyncio
    async def test_remove_listener(self, scheduler, changes):
        controller = manual(scheduler)
        controller.add_listener(changes)
        controller.remove_listener(changes)

        controller.play_forward()
        scheduler.advance(48)

        assert changes.received == []


class TestWallClock:
    """Plays on the asyncio scheduler take real time."""

    @pytest.mark.asyncio
    async def test_play_forward_takes_duration(self):
        scheduler = AsyncioScheduler(fps=120)
        controller = EntranceController(
            AnimationConfig(duration_ms=80, delay_ms=NO_AUTO_PLAY), scheduler
        )
        loop = asyncio.get_running_loop()

        started = loop.time()
        await controller.play_forward()
        elapsed = loop.time() - started

        assert 0.07 <= elapsed < 0.5
        assert controller.progress > 0.0

        # The frame task catches up shortly after the timer
        await asyncio.sleep(0.1)
        assert controller.progress == 1.0
        assert controller.phase == Phase.SETTLED

        controller.dispose()
        scheduler.close()
