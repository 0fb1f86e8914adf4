import pytest

from fadein.animation.types import AnimationConfig
from fadein.core.scheduler import ManualScheduler


@pytest.fixture
def scheduler():
    """Virtual clock ticking in 16ms frames."""
    return ManualScheduler(frame_ms=16.0)


@pytest.fixture
def config():
    return AnimationConfig(duration_ms=333.0)


@pytest.fixture
def changes():
    """Collects render notifications."""
    received = []

    def on_change():
        received.append(True)

    on_change.received = received
    return on_change
