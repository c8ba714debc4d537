import math

import pytest

from mazeshooter.components import (
    Bullet,
    DeadPlayer,
    Deaths,
    Health,
    HeldWeapon,
    InputState,
    Insert,
    Kills,
    LookDirection,
    Despawn,
    Position,
    Vec2,
    Velocity,
    WeaponCrate,
)
from mazeshooter.defaults import DEFAULT_PLAYER_HP
from mazeshooter.ecs import ServerEcs
from mazeshooter.gamemap import EMPTY, Map
from mazeshooter.gun import Gun
from mazeshooter.logger import Logger
from mazeshooter.servercomponents import (
    BulletDespawn,
    CorpseTimer,
    ShootCooldown,
    ShotBy,
    Speed,
)
from mazeshooter.spawn import spawn_bullet, spawn_player_at
from mazeshooter import systems


@pytest.fixture
def ecs():
    state = ServerEcs()
    state.rng.seed(7)
    state.resources.insert(Map.default())
    state.resources.insert(Logger(False))
    return state


def _player(ecs, x=4.5, y=4.5, name="a"):
    return spawn_player_at(Position(Vec2(x, y)), ecs, name)


def test_input_forward_sets_velocity_to_speed(ecs):
    entity = _player(ecs)
    ecs.world.insert_one(entity, InputState(forward=True))
    systems.input_system(ecs, 0.1)
    speed = ecs.world.get(entity, Speed).value
    vel = ecs.world.get(entity, Velocity).value
    assert vel.x == pytest.approx(speed)
    assert vel.y == pytest.approx(0.0)


def test_input_opposite_keys_cancel(ecs):
    entity = _player(ecs)
    ecs.world.insert_one(entity, InputState(forward=True, backward=True))
    systems.input_system(ecs, 0.1)
    assert ecs.world.get(entity, Velocity).value == Vec2()


def test_input_diagonal_is_normalised_and_recorded(ecs):
    entity = _player(ecs)
    ecs.observer.drain_reliable()
    ecs.world.insert_one(entity, InputState(forward=True, right=True, look_angle=1.0))
    systems.input_system(ecs, 0.1)
    vel = ecs.world.get(entity, Velocity).value
    assert vel.length() == pytest.approx(ecs.world.get(entity, Speed).value)
    look = ecs.world.get(entity, LookDirection).value
    assert look == Vec2.from_angle(1.0)
    kinds = {type(item.component) for item in ecs.observer.drain_reliable()}
    assert kinds == {LookDirection, Velocity}


def test_move_system_applies_velocity(ecs):
    entity = ecs.world.spawn(Position(Vec2(1.0, 1.0)), Velocity(Vec2(1.0, 2.0)))
    systems.move_system(ecs, 0.5)
    assert ecs.world.get(entity, Position).value == Vec2(1.5, 2.0)
    assert ecs.observer.drain_reliable() == [Insert(entity, Position(Vec2(1.5, 2.0)))]


def test_reset_to_pistol_only_when_empty(ecs):
    empty = ecs.world.spawn(HeldWeapon(Gun.SNIPER, 0))
    loaded = ecs.world.spawn(HeldWeapon(Gun.SNIPER, 3))
    systems.reset_to_pistol(ecs, 0.0)
    assert ecs.world.get(empty, HeldWeapon) == HeldWeapon(Gun.PISTOL, Gun.PISTOL.max_ammo())
    assert ecs.world.get(loaded, HeldWeapon) == HeldWeapon(Gun.SNIPER, 3)


def test_shoot_spawns_bullet_and_cooldown(ecs):
    entity = _player(ecs)
    ecs.world.insert_one(entity, InputState(shoot=True))
    systems.shoot_system(ecs, 0.0)
    bullets = ecs.world.query(Bullet, Position)
    assert len(bullets) == 1
    _, (bullet, pos) = bullets[0]
    assert bullet.owner == entity
    assert pos.value.x == pytest.approx(4.9)
    assert ecs.world.get(entity, ShootCooldown).data is None

    systems.shoot_system(ecs, 0.0)
    assert len(ecs.world.query(Bullet)) == 1


def test_shotgun_fires_all_pellets_and_uses_ammo(ecs):
    entity = _player(ecs)
    ecs.world.insert(entity, InputState(shoot=True), Gun.SHOTGUN.to_held_weapon())
    systems.shoot_system(ecs, 0.0)
    assert len(ecs.world.query(Bullet)) == Gun.SHOTGUN.pellets()
    assert ecs.world.get(entity, HeldWeapon).ammo == Gun.SHOTGUN.max_ammo() - 1


def test_empty_gun_does_not_fire(ecs):
    entity = _player(ecs)
    ecs.world.insert(entity, InputState(shoot=True), HeldWeapon(Gun.SNIPER, 0))
    systems.shoot_system(ecs, 0.0)
    assert ecs.world.query(Bullet) == []
    assert ecs.world.query(ShootCooldown) == []


def test_shoot_cooldown_system_removes_finished(ecs):
    done = ecs.world.spawn(ShootCooldown(0))
    pending = ecs.world.spawn(ShootCooldown(100))
    systems.shoot_cooldown_system(ecs, 0.0)
    assert [entity for entity, _ in ecs.world.query(ShootCooldown)] == [pending]
    assert ecs.world.contains(done)


def test_bullet_despawn_system(ecs):
    owner = _player(ecs)
    from mazeshooter.components import Player

    player = ecs.world.get(owner, Player)
    (bullet,) = spawn_bullet(
        ecs, player, Position(Vec2(4.5, 4.5)), LookDirection(Vec2(1.0, 0.0)), Gun.PISTOL
    )
    ecs.world.insert_one(bullet, BulletDespawn(0))
    ecs.observer.drain_reliable()
    systems.bullet_despawn_system(ecs, 0.0)
    assert not ecs.world.contains(bullet)
    assert ecs.observer.drain_reliable() == [Despawn(bullet)]


def test_pick_up_swaps_weapon_and_replaces_crate(ecs):
    entity = _player(ecs)
    crate = ecs.observed_world().spawn(WeaponCrate(Gun.SNIPER), Position(Vec2(4.5, 4.5)))
    systems.pick_up_system(ecs, 0.0)
    assert ecs.world.get(entity, HeldWeapon) == Gun.SNIPER.to_held_weapon()
    assert not ecs.world.contains(crate)
    assert len(ecs.world.query(WeaponCrate)) == 1


def test_pick_up_ignores_distant_crate(ecs):
    entity = _player(ecs)
    crate = ecs.world.spawn(WeaponCrate(Gun.SNIPER), Position(Vec2(7.5, 4.5)))
    systems.pick_up_system(ecs, 0.0)
    assert ecs.world.get(entity, HeldWeapon).gun is Gun.PISTOL
    assert ecs.world.contains(crate)


def test_respawn_resets_and_scores(ecs):
    victim = _player(ecs, name="victim")
    killer = _player(ecs, 7.5, 4.5, name="killer")
    ecs.world.get(victim, Health).value = 0.0
    ecs.world.get(victim, ShotBy).id = killer
    ecs.world.insert_one(victim, HeldWeapon(Gun.SNIPER, 2))

    systems.respawn_system(ecs, 0.0)

    assert ecs.world.get(victim, Health).value == DEFAULT_PLAYER_HP
    assert ecs.world.get(victim, Deaths).value == 1
    assert ecs.world.get(killer, Kills).value == 1
    assert ecs.world.get(killer, Deaths).value == 0
    assert ecs.world.get(victim, HeldWeapon).gun is Gun.PISTOL
    pos = ecs.world.get(victim, Position).value
    game_map = ecs.resources.get(Map)
    assert game_map.cell(math.floor(pos.x), math.floor(pos.y)) == EMPTY

    corpses = ecs.world.query(DeadPlayer, Position, CorpseTimer)
    assert len(corpses) == 1
    assert corpses[0][1][1].value == Vec2(4.5, 4.5)


def test_respawn_removes_finished_corpse(ecs):
    corpse = ecs.world.spawn(DeadPlayer(), Position(Vec2(1.5, 1.5)), CorpseTimer(0))
    systems.respawn_system(ecs, 0.0)
    assert not ecs.world.contains(corpse)


def test_run_applies_input_and_moves(ecs):
    entity = _player(ecs)
    ecs.world.insert_one(entity, InputState(forward=True))
    systems.run(ecs, 0.0)
    assert ecs.world.get(entity, Velocity).value.length() == pytest.approx(
        ecs.world.get(entity, Speed).value
    )
    assert ecs.world.get(entity, Position).value == Vec2(4.5, 4.5)