"""Records changes made to a world as messages for clients."""

from __future__ import annotations

import copy
from typing import Any

from .components import SHARED_COMPONENTS, Despawn, Insert, Remove
from .world import World


def _require_shared(components: tuple) -> None:
    for component in components:
        if type(component) not in SHARED_COMPONENTS:
            raise TypeError(f"{type(component).__name__} is not a shared component")


def _require_shared_types(kinds: tuple) -> None:
    for kind in kinds:
        if kind not in SHARED_COMPONENTS:
            raise TypeError(f"{getattr(kind, '__name__', kind)} is not a shared component")


class Observer:
    """Queues of change messages, split into reliable and unreliable ones."""

    def __init__(self) -> None:
        self._reliable: list = []
        self._unreliable: list = []

    def _push(self, item: Any, reliable: bool) -> None:
        (self._reliable if reliable else self._unreliable).append(item)

    def observe(self, world: World) -> ObservedWorld:
        """A view of ``world`` whose changes are recorded here."""
        return ObservedWorld(self, world)

    def observe_component(self, entity: int, component: Any) -> ObservedComponent:
        """Wrap a component so that its state is recorded once the edit is done."""
        return ObservedComponent(self, entity, component)

    def drain_reliable(self) -> list:
        """Take all reliable messages recorded since the last drain."""
        items, self._reliable = self._reliable, []
        return items

    def drain_unreliable(self) -> list:
        """Take all unreliable messages recorded since the last drain."""
        items, self._unreliable = self._unreliable, []
        return items


class ObservedWorld:
    """Mirrors the world's mutating operations and records each one."""

    def __init__(self, observer: Observer, world: World) -> None:
        self._observer = observer
        self._world = world
        self._reliable = True

    @property
    def world(self) -> World:
        return self._world

    def _push(self, item: Any) -> None:
        self._observer._push(item, self._reliable)

    def unreliable(self) -> ObservedWorld:
        """Record the following operations in the unreliable queue."""
        self._reliable = False
        return self

    def spawn(self, *args: Any) -> int:
        _require_shared(args)
        entity = self._world.spawn(*args)
        for component in args:
            self._push(Insert(entity, copy.copy(component)))
        return entity

    def insert(self, entity: int, *args: Any) -> None:
        _require_shared(args)
        self._world.insert(entity, *args)
        for component in args:
            self._push(Insert(entity, copy.copy(component)))

    def insert_one(self, entity: int, component: Any) -> None:
        self.insert(entity, component)

    def remove(self, entity: int, *args: type) -> tuple:
        """Remove components; the removal is recorded even if it fails."""
        _require_shared_types(args)
        try:
            return self._world.remove(entity, *args)
        finally:
            for kind in args:
                self._push(Remove(entity, kind))

    def remove_one(self, entity: int, component_type: type) -> Any:
        (component,) = self.remove(entity, component_type)
        return component

    def despawn(self, entity: int) -> None:
        """Despawn an entity; the despawn is recorded even if it fails."""
        try:
            self._world.despawn(entity)
        finally:
            self._push(Despawn(entity))


class ObservedComponent:
    """Context manager around a component; records an insert of its final state."""

    def __init__(self, observer: Observer, entity: int, component: Any) -> None:
        _require_shared((component,))
        self._observer = observer
        self.entity = entity
        self.component = component
        self._reliable = True
        self._committed = False

    def unreliable(self) -> ObservedComponent:
        """Record the change in the unreliable queue."""
        self._reliable = False
        return self

    def commit(self) -> None:
        """Record the component's current state; later calls do nothing."""
        if self._committed:
            return
        self._committed = True
        self._observer._push(Insert(self.entity, copy.copy(self.component)), self._reliable)

    def __enter__(self) -> Any:
        return self.component

    def __exit__(self, *args: Any) -> None:
        self.commit()