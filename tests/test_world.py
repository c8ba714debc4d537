from dataclasses import dataclass

import pytest

from mazeshooter.components import Health, Insert, Player, Position, Vec2, Velocity
from mazeshooter.world import (
    ComponentError,
    NoSuchEntity,
    World,
    apply_insert,
    apply_remove,
    query_all,
)


@dataclass
class Marker:
    pass


def test_spawn_and_get():
    world = World()
    pos = Position(Vec2(1.0, 2.0))
    entity = world.spawn(pos, Health(50.0))
    assert world.get(entity, Position) is pos
    assert world.get(entity, Health) == Health(50.0)
    assert len(world) == 1


def test_entity_ids_are_unique_and_nonzero():
    world = World()
    ids = [world.reserve_entity() for _ in range(5)]
    assert len(set(ids)) == 5
    assert all(entity > 0 for entity in ids)


def test_reserved_entity_exists_without_components():
    world = World()
    entity = world.reserve_entity()
    assert world.contains(entity)
    with pytest.raises(ComponentError):
        world.get(entity, Position)


def test_insert_replaces_component_of_same_type():
    world = World()
    entity = world.spawn(Health(10.0))
    world.insert(entity, Health(20.0), Marker())
    assert world.get(entity, Health) == Health(20.0)
    assert world.get(entity, Marker) == Marker()


def test_insert_into_missing_entity_raises():
    world = World()
    with pytest.raises(NoSuchEntity):
        world.insert_one(99, Health(1.0))


def test_remove_returns_components_in_requested_order():
    world = World()
    pos = Position(Vec2())
    hp = Health(3.0)
    entity = world.spawn(pos, hp)
    assert world.remove(entity, Health, Position) == (hp, pos)
    assert world.query(Health) == []


def test_remove_with_missing_component_changes_nothing():
    world = World()
    entity = world.spawn(Health(3.0))
    with pytest.raises(ComponentError):
        world.remove(entity, Health, Position)
    assert world.get(entity, Health) == Health(3.0)


def test_remove_one():
    world = World()
    hp = Health(7.0)
    entity = world.spawn(hp, Marker())
    assert world.remove_one(entity, Health) is hp
    with pytest.raises(ComponentError):
        world.remove_one(entity, Health)


def test_despawn():
    world = World()
    entity = world.spawn(Health(1.0))
    world.despawn(entity)
    assert not world.contains(entity)
    assert len(world) == 0
    with pytest.raises(NoSuchEntity):
        world.despawn(entity)
    with pytest.raises(ComponentError):
        world.get(entity, Health)


def test_query_requires_all_types():
    world = World()
    both = world.spawn(Position(Vec2()), Velocity(Vec2(1.0, 0.0)))
    world.spawn(Position(Vec2()))
    results = world.query(Position, Velocity)
    assert [entity for entity, _ in results] == [both]
    _, (pos, vel) = results[0]
    assert vel == Velocity(Vec2(1.0, 0.0))
    assert pos is world.get(both, Position)


def test_query_without_excludes():
    world = World()
    plain = world.spawn(Health(1.0))
    world.spawn(Health(2.0), Marker())
    assert [entity for entity, _ in world.query(Health, without=Marker)] == [plain]
    assert [entity for entity, _ in world.query(Health, without=(Marker,))] == [plain]


def test_query_is_a_snapshot():
    world = World()
    entities = [world.spawn(Health(1.0)) for _ in range(3)]
    for entity, _ in world.query(Health):
        world.despawn(entity)
    assert all(not world.contains(entity) for entity in entities)


def test_apply_insert_and_remove():
    world = World()
    entity = world.reserve_entity()
    apply_insert(world, entity, Health(5.0))
    assert world.get(entity, Health) == Health(5.0)
    apply_remove(world, entity, Health)
    with pytest.raises(ComponentError):
        world.get(entity, Health)


def test_query_all_follows_registration_order_and_copies():
    world = World()
    hp = Health(4.0)
    first = world.spawn(hp, Position(Vec2(1.0, 1.0)), Marker())
    second = world.spawn(Player(5, "bob"))
    inserts = query_all(world)
    assert inserts == [
        Insert(first, Position(Vec2(1.0, 1.0))),
        Insert(first, Health(4.0)),
        Insert(second, Player(5, "bob")),
    ]
    assert inserts[1].component is not hp