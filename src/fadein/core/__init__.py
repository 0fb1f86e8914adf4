"""Core scheduling components for fadein."""

from .scheduler import Scheduler, AsyncioScheduler, ManualScheduler, Cancellable

__all__ = ["Scheduler", "AsyncioScheduler", "ManualScheduler", "Cancellable"]
