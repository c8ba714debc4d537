"""Per-tick simulation systems run by the server."""

from __future__ import annotations

import copy

from .collisions import collision_system
from .components import (
    Deaths,
    DeadPlayer,
    Health,
    HeldWeapon,
    InputState,
    Kills,
    LookDirection,
    Player,
    Position,
    Vec2,
    Velocity,
    WeaponCrate,
)
from .defaults import DEFAULT_PLAYER_HP
from .ecs import ServerEcs
from .gamemap import Map
from .gun import Gun
from .logger import Logger
from .servercomponents import (
    BulletDespawn,
    CorpseTimer,
    ShootCooldown,
    ShotBy,
    Speed,
)
from .spawn import spawn_bullet, spawn_weapon_crate

CORPSE_SECONDS = 1.95
PICK_UP_REACH = 0.3
MUZZLE_OFFSET = 0.4


def run(ecs: ServerEcs, dt: float) -> None:
    """Run every system once, in order."""
    input_system(ecs, dt)
    move_system(ecs, dt)
    shoot_system(ecs, dt)
    shoot_cooldown_system(ecs, dt)
    bullet_despawn_system(ecs, dt)
    pick_up_system(ecs, dt)
    respawn_system(ecs, dt)
    collision_system(ecs, dt)
    reset_to_pistol(ecs, dt)


def input_system(ecs: ServerEcs, dt: float) -> None:
    """Apply each player's input state to its look direction and velocity."""
    for entity, (inputs, vel, look_dir, speed) in ecs.world.query(
        InputState, Velocity, LookDirection, Speed
    ):
        with ecs.observer.observe_component(entity, look_dir) as observed:
            observed.value = Vec2.from_angle(inputs.look_angle)

        forward = look_dir.value
        right = forward.perp()
        move_dir = Vec2()
        if inputs.forward:
            move_dir = move_dir + forward
        if inputs.backward:
            move_dir = move_dir - forward
        if inputs.right:
            move_dir = move_dir + right
        if inputs.left:
            move_dir = move_dir - right

        with ecs.observer.observe_component(entity, vel) as observed:
            observed.value = move_dir.normalize_or_zero() * speed.value


def move_system(ecs: ServerEcs, dt: float) -> None:
    """Move everything that has a position and a velocity."""
    for entity, (vel, pos) in ecs.world.query(Velocity, Position):
        with ecs.observer.observe_component(entity, pos) as observed:
            observed.value = observed.value + vel.value * dt


def shoot_system(ecs: ServerEcs, dt: float) -> None:
    """Fire the guns of players who shoot and are not cooling down."""
    bullets = []
    cooldowns = []

    for entity, (player, inputs, look_dir, position, weapon) in ecs.world.query(
        Player, InputState, LookDirection, Position, HeldWeapon, without=ShootCooldown
    ):
        with ecs.observer.observe_component(entity, weapon) as observed:
            out_of_ammo = observed.gun.max_ammo() != 0 and observed.ammo == 0
            if not inputs.shoot or out_of_ammo:
                continue

            muzzle = position.value + look_dir.value * MUZZLE_OFFSET
            bullets.append(
                (copy.copy(player), Position(muzzle), LookDirection(look_dir.value), observed.gun)
            )
            observed.ammo = max(observed.ammo - 1, 0)
            cooldowns.append((entity, ShootCooldown(observed.gun.recharge())))

    for player, pos, direction, gun in bullets:
        spawn_bullet(ecs, player, pos, direction, gun)

    for entity, cooldown in cooldowns:
        ecs.world.insert_one(entity, cooldown)


def shoot_cooldown_system(ecs: ServerEcs, dt: float) -> None:
    """Drop finished shooting cooldowns."""
    ShootCooldown.system(ecs.world)


def bullet_despawn_system(ecs: ServerEcs, dt: float) -> None:
    """Despawn bullets that have travelled their range."""
    BulletDespawn.system_with(
        ecs.world, lambda world, entity, _: ecs.observer.observe(world).despawn(entity)
    )


def pick_up_system(ecs: ServerEcs, dt: float) -> None:
    """Give players the gun of any crate they stand on and replace the crate."""
    logger = ecs.resources.get(Logger)

    players = [
        (entity, pos.value) for entity, (pos, _) in ecs.world.query(Position, HeldWeapon)
    ]
    crates = [
        (entity, pos.value, weapon_crate.gun)
        for entity, (pos, weapon_crate) in ecs.world.query(Position, WeaponCrate)
    ]

    for player_entity, player_pos in players:
        for crate_entity, crate_pos, gun in crates:
            if (
                abs(player_pos.x - crate_pos.x) < PICK_UP_REACH
                and abs(player_pos.y - crate_pos.y) < PICK_UP_REACH
            ):
                ecs.observed_world().insert(player_entity, gun.to_held_weapon())
                ecs.observed_world().despawn(crate_entity)
                spawn_weapon_crate(ecs)
                logger.log("a weapon was picked up")


def respawn_system(ecs: ServerEcs, dt: float) -> None:
    """Respawn dead players, keep score and leave a short-lived corpse."""
    killers = []
    death_positions = []

    for entity, (pos, health, weapon, deaths, shot_by) in ecs.world.query(
        Position, Health, HeldWeapon, Deaths, ShotBy
    ):
        if health.value > 0.0:
            continue
        death_positions.append(pos.value)
        killers.append(shot_by.id)

        spot = ecs.resources.get(Map).random_empty_spot(ecs.rng)
        if spot is None:
            raise RuntimeError("Can't find a random spot")
        with ecs.observer.observe_component(entity, pos) as observed:
            observed.value = spot.value

        with ecs.observer.observe_component(entity, health) as observed:
            observed.value = DEFAULT_PLAYER_HP

        with ecs.observer.observe_component(entity, weapon) as observed:
            observed.gun = Gun.PISTOL
            observed.ammo = observed.gun.max_ammo()

        with ecs.observer.observe_component(entity, deaths) as observed:
            observed.value += 1

    credited = {killer for killer in killers if killer is not None}
    for entity, (player, kills) in ecs.world.query(Player, Kills):
        if player.id in credited:
            with ecs.observer.observe_component(entity, kills) as observed:
                observed.value += 1

    for death_pos in death_positions:
        corpse = ecs.observed_world().spawn(DeadPlayer(), Position(death_pos))
        ecs.world.insert_one(corpse, CorpseTimer(CORPSE_SECONDS))

    CorpseTimer.system_with(
        ecs.world, lambda world, entity, _: ecs.observer.observe(world).despawn(entity)
    )


def reset_to_pistol(ecs: ServerEcs, dt: float) -> None:
    """Swap empty weapons back to a pistol."""
    for _, (weapon,) in ecs.world.query(HeldWeapon):
        if weapon.ammo == 0:
            weapon.gun = Gun.PISTOL
            weapon.ammo = weapon.gun.max_ammo()