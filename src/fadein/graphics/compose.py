"""Compose entrance channel values onto pixel buffers."""

from typing import Optional, Tuple
import logging
import numpy as np
from numpy.typing import NDArray

from fadein.animation.controller import EntranceController
from fadein.animation.types import AnimationConfig, ChannelValues
from fadein.core.scheduler import Scheduler

logger = logging.getLogger(__name__)

# Type aliases
Color = Tuple[int, int, int]
Buffer = NDArray[np.uint8]


def make_card(width: int, height: int, color: Color, border: Optional[Color] = None) -> Buffer:
    """Create a solid RGB image, optionally with a 1px border."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, :] = color
    if border is not None and width > 2 and height > 2:
        image[0, :] = border
        image[-1, :] = border
        image[:, 0] = border
        image[:, -1] = border
    return image


def scale_image(image: Buffer, factor: float) -> Buffer:
    """Nearest-neighbor resize by factor. Non-positive factors give an empty image."""
    h, w = image.shape[:2]
    new_w = int(round(w * factor))
    new_h = int(round(h * factor))
    if new_w <= 0 or new_h <= 0:
        return np.zeros((0, 0, image.shape[2]), dtype=image.dtype)
    if new_w == w and new_h == h:
        return image

    rows = np.minimum((np.arange(new_h) / factor).astype(int), h - 1)
    cols = np.minimum((np.arange(new_w) / factor).astype(int), w - 1)
    return image[rows[:, None], cols[None, :]]


def draw_image(
    buffer: Buffer,
    image: Buffer,
    x: int,
    y: int,
    alpha: float = 1.0,
) -> None:
    """Draw an image onto the buffer with optional alpha blending.

    Args:
        buffer: Target numpy array (height, width, 3)
        image: Source image array (height, width, 3)
        x: Top-left x coordinate
        y: Top-left y coordinate
        alpha: Global alpha multiplier, clamped to 0.0 - 1.0 for blending
    """
    if image.size == 0:
        return

    buf_h, buf_w = buffer.shape[:2]
    img_h, img_w = image.shape[:2]

    # Visible region
    src_x1 = max(0, -x)
    src_y1 = max(0, -y)
    src_x2 = min(img_w, buf_w - x)
    src_y2 = min(img_h, buf_h - y)

    dst_x1 = max(0, x)
    dst_y1 = max(0, y)
    dst_x2 = dst_x1 + (src_x2 - src_x1)
    dst_y2 = dst_y1 + (src_y2 - src_y1)

    if src_x2 <= src_x1 or src_y2 <= src_y1:
        return

    src_region = image[src_y1:src_y2, src_x1:src_x2]
    alpha = max(0.0, min(1.0, alpha))

    if alpha >= 1.0:
        buffer[dst_y1:dst_y2, dst_x1:dst_x2] = src_region
    else:
        dst_region = buffer[dst_y1:dst_y2, dst_x1:dst_x2]
        blended = (src_region * alpha + dst_region * (1 - alpha)).astype(np.uint8)
        buffer[dst_y1:dst_y2, dst_x1:dst_x2] = blended


def compose_entrance(
    buffer: Buffer,
    child: Buffer,
    x: int,
    y: int,
    values: ChannelValues,
) -> None:
    """Draw child at (x, y) transformed by the channel values.

    Scaling is about the child's center, then (dx, dy) is applied.
    Erased or fully transparent values draw nothing.
    """
    if values.erased or values.opacity <= 0.0:
        return

    scaled = scale_image(child, values.scale)
    if scaled.size == 0:
        return

    ch, cw = child.shape[:2]
    sh, sw = scaled.shape[:2]
    left = x + (cw - sw) / 2 + values.dx
    top = y + (ch - sh) / 2 + values.dy
    draw_image(buffer, scaled, int(round(left)), int(round(top)), values.opacity)


class FadeIn:
    """A child image animated in by its own EntranceController.

    With config.skip_animation set there is no automatic play: the child is
    drawn at its settled position until an explicit dismount erases it.
    """

    def __init__(
        self,
        child: Buffer,
        x: int,
        y: int,
        config: AnimationConfig,
        scheduler: Scheduler,
        name: str = "fade_in",
    ) -> None:
        self.child = child
        self.x = x
        self.y = y
        self.name = name
        self.dirty = True
        self.controller = EntranceController(config, scheduler, on_change=self._mark_dirty)

    def _mark_dirty(self) -> None:
        self.dirty = True

    def values(self) -> ChannelValues:
        return self.controller.values()

    def render(self, buffer: Buffer) -> None:
        """Draw the current frame of this child."""
        compose_entrance(buffer, self.child, self.x, self.y, self.controller.values())
        self.dirty = False

    def dispose(self) -> None:
        self.controller.dispose()
        logger.debug(f"FadeIn disposed: {self.name}")
