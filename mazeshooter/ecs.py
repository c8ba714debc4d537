"""The server's entity-component state: world, change observer and resources."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .components import Insert
from .observer import ObservedWorld, Observer
from .world import World, query_all

T = TypeVar("T")


class Resources:
    """Singleton values shared by systems, one per type."""

    def __init__(self) -> None:
        self._values: dict[type, Any] = {}

    def insert(self, value: Any) -> None:
        """Store ``value``, replacing any earlier value of the same type."""
        self._values[type(value)] = value

    def get(self, kind: type[T]) -> T:
        try:
            return self._values[kind]
        except KeyError:
            raise KeyError(f"no resource of type {kind.__name__}") from None

    def __contains__(self, kind: object) -> bool:
        return kind in self._values


@dataclass
class ServerEcs:
    """Everything the simulation systems work on."""

    world: World = field(default_factory=World)
    observer: Observer = field(default_factory=Observer)
    resources: Resources = field(default_factory=Resources)
    rng: random.Random = field(default_factory=random.Random)

    def observed_world(self) -> ObservedWorld:
        """A view of the world whose changes are recorded by the observer."""
        return self.observer.observe(self.world)

    def tick(self, dt: float) -> None:
        """Run every system once with ``dt`` seconds since the last tick."""
        from .systems import run

        run(self, dt)

    def init_client(self) -> list[Insert]:
        """Messages that bring a new client up to the current world state."""
        return query_all(self.world)