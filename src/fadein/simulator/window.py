"""
Preview window using pygame.

Shows a column of cards, each animated in by its own FadeIn with a
staggered delay, on a small virtual canvas scaled up for the desktop.
"""

import pygame
import asyncio
import logging
from dataclasses import replace

import numpy as np

from ..animation.types import AnimationConfig, EntranceDirection
from ..config.settings import Settings, get_settings
from ..core.scheduler import AsyncioScheduler
from ..graphics.compose import FadeIn, make_card

logger = logging.getLogger(__name__)

CARD_COLORS: list[tuple[int, int, int]] = [
    (100, 150, 255),
    (255, 140, 90),
    (120, 220, 140),
    (230, 200, 80),
]
STAGGER_MS = 120
DURATION_STEP_MS = 50


class PreviewWindow:
    """
    Desktop preview of entrance animations.

    Keyboard Mapping:
        SPACE: Play all cards forward
        BACKSPACE: Play all cards backward and dismount them
        R: Rebuild the cards (fresh controllers)
        UP/DOWN: Change duration of running and future plays
        ESC/Q: Exit
    """

    def __init__(
        self,
        config: AnimationConfig | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.config = config or self.settings.animation.to_config()
        self.scheduler = AsyncioScheduler(fps=self.settings.display.fps)

        display = self.settings.display
        self._canvas = np.zeros((display.height, display.width, 3), dtype=np.uint8)
        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._running = False
        self._frame_count = 0
        self._cards: list[FadeIn] = []
        self._tasks: set[asyncio.Task] = set()

        logger.info("PreviewWindow created")

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.settings.title)

        display = self.settings.display
        self._screen = pygame.display.set_mode(
            (display.width * display.scale, display.height * display.scale),
            pygame.DOUBLEBUF,
        )
        self._clock = pygame.time.Clock()
        logger.info(f"Pygame initialized: {display.width}x{display.height} x{display.scale}")

    def build_cards(self) -> None:
        """(Re)create one FadeIn per card color."""
        for card in self._cards:
            card.dispose()
        self._cards.clear()

        display = self.settings.display
        card_w = display.width // 2
        card_h = max(4, display.height // (len(CARD_COLORS) + 1))
        gap = card_h // 4
        x = (display.width - card_w) // 2

        for i, color in enumerate(CARD_COLORS):
            config = replace(self.config, delay_ms=self.config.delay_ms + i * STAGGER_MS)
            y = gap + i * (card_h + gap)
            self._cards.append(FadeIn(
                make_card(card_w, card_h, color, border=(255, 255, 255)),
                x, y, config, self.scheduler, name=f"card_{i}",
            ))
        logger.debug(f"Built {len(self._cards)} cards")

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        if key == pygame.K_ESCAPE or key == pygame.K_q:
            self._running = False
        elif key == pygame.K_SPACE:
            self._spawn(self._play_all(forward=True))
        elif key == pygame.K_BACKSPACE:
            self._spawn(self._play_all(forward=False))
        elif key == pygame.K_r:
            self.build_cards()
        elif key == pygame.K_UP:
            self._change_duration(DURATION_STEP_MS)
        elif key == pygame.K_DOWN:
            self._change_duration(-DURATION_STEP_MS)

    def _change_duration(self, delta_ms: float) -> None:
        duration = max(DURATION_STEP_MS, self.config.duration_ms + delta_ms)
        self.config = replace(self.config, duration_ms=duration)
        for card in self._cards:
            card.controller.update_config(replace(card.controller.config, duration_ms=duration))
        logger.info(f"Duration: {duration}ms")

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _play_all(self, forward: bool) -> None:
        if forward:
            plays = [card.controller.play_forward() for card in self._cards]
        else:
            plays = [card.controller.play_backward(dismount=True) for card in self._cards]
        await asyncio.gather(*plays)
        logger.info(f"{'Entrance' if forward else 'Exit'} finished")

    def _render(self) -> None:
        """Draw all cards and present the canvas."""
        if not self._screen:
            return

        self._canvas[:, :] = self.settings.display.background
        for card in self._cards:
            card.render(self._canvas)

        surface = pygame.surfarray.make_surface(self._canvas.swapaxes(0, 1))
        scaled = pygame.transform.scale(surface, self._screen.get_size())
        self._screen.blit(scaled, (0, 0))
        pygame.display.flip()

    async def run(self) -> None:
        """Main preview loop."""
        self._init_pygame()
        self.build_cards()
        self._running = True

        logger.info("Preview started")

        while self._running:
            self._handle_events()
            self._render()

            if self._clock:
                self._clock.tick(self.settings.display.fps)
            self._frame_count += 1

            # Yield to the scheduler's timers and frame task
            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up cards and pygame resources."""
        for card in self._cards:
            card.dispose()
        self._cards.clear()
        for task in list(self._tasks):
            task.cancel()
        self.scheduler.close()
        pygame.quit()
        logger.info("Preview stopped")

    def stop(self) -> None:
        """Stop the preview."""
        self._running = False


def exit_config(config: AnimationConfig) -> AnimationConfig:
    """Config that starts settled and plays out, dismounting at the end."""
    return replace(config, direction=EntranceDirection.EXIT, dismount_after_exit=True)
