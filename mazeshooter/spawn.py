"""Creation of players, bullets and weapon crates."""

from __future__ import annotations

import random
from datetime import timedelta

from .components import (
    Bullet,
    Deaths,
    Health,
    InputState,
    Kills,
    LookDirection,
    Player,
    Position,
    Vec2,
    Velocity,
    WeaponCrate,
)
from .defaults import DEFAULT_PLAYER_HP, WEAPON_CRATES_AMOUNT
from .ecs import ServerEcs
from .gamemap import Map
from .gun import Gun, random_gun
from .servercomponents import BulletDespawn, ShotBy, Speed

DEFAULT_SPEED = 2.5


def _random_spot(ecs: ServerEcs, rng: random.Random) -> Position:
    spot = ecs.resources.get(Map).random_empty_spot(rng)
    if spot is None:
        raise RuntimeError("Can't find a random spot")
    return spot


def spawn_bullet(
    ecs: ServerEcs,
    player: Player,
    pos: Position,
    direction: LookDirection,
    gun: Gun,
    rng: random.Random | None = None,
) -> list[int]:
    """Fire one bullet per pellet of ``gun``; returns the bullet entities."""
    if not direction.value.is_normalized():
        raise ValueError(f"direction must be a unit vector, got {direction.value}")
    source = rng if rng is not None else ecs.rng
    lifetime = timedelta(seconds=gun.range() / gun.bullet_speed())
    spread = gun.spread()

    bullets = []
    for _ in range(gun.pellets()):
        entity = ecs.world.reserve_entity()
        heading = direction.value
        if spread is not None:
            heading = Vec2.from_angle(source.uniform(-spread, spread)).rotate(heading)

        ecs.observed_world().insert(
            entity,
            Bullet(player.id, gun),
            Position(pos.value),
            Velocity(heading * gun.bullet_speed()),
        )
        ecs.world.insert(entity, BulletDespawn(lifetime))
        bullets.append(entity)
    return bullets


def spawn_player_at(pos: Position, ecs: ServerEcs, username: str) -> int:
    """Create a player entity standing at ``pos``."""
    entity = ecs.world.reserve_entity()
    ecs.observed_world().insert(
        entity,
        Player(entity, username),
        Position(pos.value),
        Health(DEFAULT_PLAYER_HP),
        Velocity(Vec2()),
        LookDirection(Vec2.from_angle(0.0)),
        Gun.PISTOL.to_held_weapon(),
        Kills(0),
        Deaths(0),
    )
    ecs.world.insert(entity, ShotBy(None), InputState(), Speed(DEFAULT_SPEED))
    return entity


def spawn_player(
    ecs: ServerEcs, username: str, rng: random.Random | None = None
) -> tuple[Position, int]:
    """Create a player on a random empty cell of the map."""
    pos = _random_spot(ecs, rng if rng is not None else ecs.rng)
    return pos, spawn_player_at(pos, ecs, username)


def spawn_weapon_crate(ecs: ServerEcs, rng: random.Random | None = None) -> int:
    """Place a crate with a random gun on a random empty cell."""
    source = rng if rng is not None else ecs.rng
    entity = ecs.world.reserve_entity()
    pos = _random_spot(ecs, source)
    ecs.observed_world().insert(entity, WeaponCrate(random_gun(source)), pos)
    return entity


def spawn_weapon_crates_init(ecs: ServerEcs, rng: random.Random | None = None) -> list[int]:
    """Place the initial set of weapon crates."""
    return [spawn_weapon_crate(ecs, rng) for _ in range(WEAPON_CRATES_AMOUNT + 1)]