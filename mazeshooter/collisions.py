"""Pushing players out of walls, bullet hits, and bullets hitting walls."""

from __future__ import annotations

import math

from .components import Bullet, Health, Player, Position, Vec2
from .defaults import PLAYER_SIZE
from .ecs import ServerEcs
from .gamemap import EMPTY, Map
from .servercomponents import BulletDespawn, ShotBy
from .world import NoSuchEntity


def _div(a: float, b: float) -> float:
    try:
        return a / b
    except ZeroDivisionError:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0.0 else math.nan


def _fmax(a: float, b: float) -> float:
    if math.isnan(a):
        return b
    if math.isnan(b):
        return a
    return max(a, b)


def _acos(value: float) -> float:
    if not -1.0 <= value <= 1.0:
        value = value - math.fmod(value, 1.0) if math.isfinite(value) else math.nan
    return math.acos(value) if not math.isnan(value) else math.nan


def in_circle(line: tuple[Vec2, Vec2], pos: Vec2) -> bool:
    """Whether the infinite line through ``line`` passes within a player's radius of ``pos``."""
    start, end = line
    radius = PLAYER_SIZE / 2.0
    length = math.hypot(start.x - end.x, start.y - end.y)
    cross = (pos.x - start.x) * (end.y - start.y) - (pos.y - start.y) * (end.x - start.x)
    return _div(abs(cross), length) <= radius


def resolve_wall_collision(game_map: Map, pos: Vec2, size: float) -> Vec2:
    """Position of a body of diameter ``size`` at ``pos`` after being pushed out of walls."""
    if not (math.isfinite(pos.x) and math.isfinite(pos.y)):
        return pos

    xi, yi = math.floor(pos.x), math.floor(pos.y)
    xf, yf = float(xi), float(yi)
    half = size / 2.0
    tx, ty = pos.x, pos.y

    # (neighbour cell, its edge facing us, axis to fix, corrected coordinate)
    sides = (
        ((xi, yi + 1), (Vec2(xf, yf + 1.0), Vec2(xf + 1.0, yf + 1.0)), "y", yf + (1.0 - half)),
        ((xi + 1, yi), (Vec2(xf + 1.0, yf), Vec2(xf + 1.0, yf - 1.0)), "x", xf + (1.0 - half)),
        ((xi, yi - 1), (Vec2(xf, yf), Vec2(xf + 1.0, yf)), "y", yf + half),
        ((xi - 1, yi), (Vec2(xf, yf), Vec2(xf, yf - 1.0)), "x", xf + half),
    )
    for (cx, cy), edge, axis, corrected in sides:
        if game_map.cell(cx, cy) == EMPTY:
            continue
        if in_circle(edge, Vec2(tx, ty)):
            if axis == "y":
                ty = corrected
            else:
                tx = corrected

    # (diagonal cell, shared corner, y direction, x direction)
    corners = (
        ((xi + 1, yi + 1), Vec2(xf + 1.0, yf + 1.0), -1.0, -1.0),
        ((xi + 1, yi - 1), Vec2(xf + 1.0, yf), 1.0, -1.0),
        ((xi - 1, yi - 1), Vec2(xf, yf), 1.0, 1.0),
        ((xi - 1, yi + 1), Vec2(xf, yf + 1.0), -1.0, 1.0),
    )
    for (cx, cy), corner, y_sign, x_sign in corners:
        if game_map.cell(cx, cy) == EMPTY:
            continue
        current = Vec2(tx, ty)
        if not current.distance(corner) < half - 0.001:
            continue

        dink = abs(ty - corner.y)
        a = Vec2(corner.x, corner.y + y_sign * dink).distance(current)
        b = _sqrt(half * half - a * a)
        change_y = b - dink

        a = change_y
        r = half
        d = pos.distance(corner)

        alpha = 360.0 - 90.0 - _acos(_div(d * d + a * a - r * r, 2.0 * a * d))
        cos_term = 2.0 * d * math.cos(alpha)
        determinant = cos_term * cos_term + 4.0 * (r * r - d * d)
        x_1 = (cos_term + _sqrt(determinant)) / 2.0
        x_2 = (cos_term - _sqrt(determinant)) / 2.0
        change_x = _fmax(x_1, x_2)

        ty += y_sign * change_y
        tx += x_sign * change_x

    return Vec2(tx, ty)


def player_collisions(ecs: ServerEcs) -> None:
    """Keep players out of walls and apply damage from bullets that reach them."""
    game_map = ecs.resources.get(Map)
    bullets = [
        (entity, bullet, pos.value, timer.progress())
        for entity, (bullet, pos, timer) in ecs.world.query(Bullet, Position, BulletDespawn)
    ]
    to_remove = []

    for entity, (player, health, pos, shot_by) in ecs.world.query(
        Player, Health, Position, ShotBy
    ):
        to_pos = resolve_wall_collision(game_map, pos.value, PLAYER_SIZE)
        with ecs.observer.observe_component(entity, pos) as observed:
            observed.value = to_pos

        for bullet_entity, bullet, bullet_pos, progress in bullets:
            if bullet_pos.distance(to_pos) < PLAYER_SIZE / 2.0 and player.id != bullet.id:
                to_remove.append(bullet_entity)
                shot_by.id = bullet.id
                with ecs.observer.observe_component(entity, health) as observed:
                    observed.value -= bullet.gun.damage_with_drop_off(progress)

    for bullet_entity in to_remove:
        try:
            ecs.observed_world().despawn(bullet_entity)
        except NoSuchEntity:
            pass


def bullet_wall_collisions(ecs: ServerEcs) -> None:
    """Despawn bullets that touch a wall."""
    game_map = ecs.resources.get(Map)
    hits = [
        entity
        for entity, (_, pos) in ecs.world.query(Bullet, Position)
        if pos.value != resolve_wall_collision(game_map, pos.value, 0.0)
    ]
    for entity in hits:
        ecs.observed_world().despawn(entity)


def collision_system(ecs: ServerEcs, dt: float) -> None:
    player_collisions(ecs)
    bullet_wall_collisions(ecs)