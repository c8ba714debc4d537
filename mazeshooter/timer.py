"""Timers stored as components, finished by a per-tick system."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Any, Callable

from .world import World


class Timer:
    """A countdown carrying some data.

    Subclasses are distinct component types, so an entity may hold several
    timers of different kinds at once.
    """

    def __init__(self, duration: timedelta | float, data: Any = None) -> None:
        seconds = (
            duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
        )
        self.start_time = time.monotonic()
        self.end_time = self.start_time + seconds
        self.data = data

    def __repr__(self) -> str:
        span = self.end_time - self.start_time
        return f"{type(self).__name__}({span!r}, {self.data!r})"

    def progress(self) -> float:
        """Elapsed share of the duration: 0.0 at start, 1.0 when it ends."""
        span = self.end_time - self.start_time
        if span <= 0.0:
            return 1.0
        return (time.monotonic() - self.start_time) / span

    def is_finished(self, now: float | None = None) -> bool:
        if now is None:
            now = time.monotonic()
        return self.end_time <= now

    @classmethod
    def finished_entities(cls, world: World) -> list[int]:
        """Entities whose timer of this kind has run out."""
        now = time.monotonic()
        return [entity for entity, (timer,) in world.query(cls) if timer.is_finished(now)]

    @classmethod
    def system(cls, world: World) -> None:
        """Remove finished timers, dropping their data."""
        for entity in cls.finished_entities(world):
            world.remove_one(entity, cls)

    @classmethod
    def system_with(
        cls, world: World, callback: Callable[[World, int, Any], None]
    ) -> None:
        """Remove finished timers and call ``callback(world, entity, data)`` for each."""
        for entity in cls.finished_entities(world):
            timer = world.remove_one(entity, cls)
            callback(world, entity, timer.data)

    @classmethod
    def system_with_insert(cls, world: World) -> None:
        """Remove finished timers and insert their data into the entity."""
        cls.system_with(world, lambda w, entity, data: w.insert_one(entity, data))