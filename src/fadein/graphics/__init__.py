"""Graphics helpers for drawing animated children."""

from fadein.graphics.compose import (
    FadeIn,
    compose_entrance,
    draw_image,
    make_card,
    scale_image,
)

__all__ = [
    "FadeIn",
    "compose_entrance",
    "draw_image",
    "make_card",
    "scale_image",
]
