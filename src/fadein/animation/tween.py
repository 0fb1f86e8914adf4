"""Linear tweens for the animation channels."""

from dataclasses import dataclass


def lerp(begin: float, end: float, t: float) -> float:
    """Linearly interpolate between two values.

    Args:
        begin: Value at t = 0.0
        end: Value at t = 1.0
        t: Normalized progress (not clamped)

    Returns:
        The interpolated value
    """
    return begin + (end - begin) * t


@dataclass(frozen=True)
class Tween:
    """A begin/end pair evaluated at a normalized progress."""

    begin: float
    end: float

    def transform(self, t: float) -> float:
        # Exact endpoints, so render(0.0) and render(1.0) match the config
        if t == 0.0:
            return self.begin
        if t == 1.0:
            return self.end
        return lerp(self.begin, self.end, t)
