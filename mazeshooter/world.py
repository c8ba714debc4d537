"""A small entity-component store: entities are integers holding one component per type."""

from __future__ import annotations

import copy
import itertools

from .components import SHARED_COMPONENTS, Insert


class ComponentError(LookupError):
    """A requested component is not present on an entity."""


class NoSuchEntity(ComponentError):
    """The entity does not exist (never created, or already despawned)."""


class World:
    """Holds entities and their components, keyed by component type."""

    def __init__(self) -> None:
        self._entities: dict[int, dict[type, object]] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity: object) -> bool:
        return entity in self._entities

    def _components(self, entity: int) -> dict[type, object]:
        try:
            return self._entities[entity]
        except KeyError:
            raise NoSuchEntity(f"no such entity: {entity}") from None

    def reserve_entity(self) -> int:
        """Create a new entity without components and return its id."""
        entity = next(self._ids)
        self._entities[entity] = {}
        return entity

    def spawn(self, *args: object) -> int:
        """Create a new entity holding the given components."""
        entity = self.reserve_entity()
        self.insert(entity, *args)
        return entity

    def insert(self, entity: int, *args: object) -> None:
        """Add components to an entity, replacing any of the same type."""
        components = self._components(entity)
        for component in args:
            components[type(component)] = component

    def insert_one(self, entity: int, component: object) -> None:
        self.insert(entity, component)

    def remove(self, entity: int, *args: type) -> tuple:
        """Remove components by type; nothing is removed unless all are present."""
        if len(set(args)) != len(args):
            raise ValueError("component types to remove must be distinct")
        components = self._components(entity)
        missing = [kind.__name__ for kind in args if kind not in components]
        if missing:
            raise ComponentError(
                f"entity {entity} lacks component(s): {', '.join(missing)}"
            )
        return tuple(components.pop(kind) for kind in args)

    def remove_one(self, entity: int, component_type: type) -> object:
        (component,) = self.remove(entity, component_type)
        return component

    def despawn(self, entity: int) -> None:
        """Delete an entity together with all of its components."""
        self._components(entity)
        del self._entities[entity]

    def contains(self, entity: int) -> bool:
        return entity in self._entities

    def get(self, entity: int, component_type: type) -> object:
        """The component of the given type held by an entity."""
        components = self._components(entity)
        try:
            return components[component_type]
        except KeyError:
            raise ComponentError(
                f"entity {entity} lacks component {component_type.__name__}"
            ) from None

    def query(self, *args: type, without: type | tuple = ()) -> list[tuple[int, tuple]]:
        """Entities holding all of the given types and none of ``without``.

        Each result is ``(entity, (component, ...))`` in the order of the types
        asked for. The result is a snapshot, so the world may be changed while
        iterating over it.
        """
        excluded = without if isinstance(without, tuple) else (without,)
        return [
            (entity, tuple(components[kind] for kind in args))
            for entity, components in self._entities.items()
            if all(kind in components for kind in args)
            and not any(kind in components for kind in excluded)
        ]


def apply_insert(world: World, entity: int, component: object) -> None:
    """Apply a component insertion to a world."""
    world.insert_one(entity, component)


def apply_remove(world: World, entity: int, component_type: type) -> None:
    """Apply a component removal to a world."""
    world.remove_one(entity, component_type)


def query_all(world: World) -> list[Insert]:
    """Insert messages that rebuild every shared component of the world."""
    return [
        Insert(entity, copy.copy(component))
        for kind in SHARED_COMPONENTS
        for entity, (component,) in world.query(kind)
    ]