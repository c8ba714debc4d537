"""Weapons and their ballistic properties."""

from __future__ import annotations

import enum
import math
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .components import HeldWeapon


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation between ``a`` and ``b``."""
    return a + (b - a) * t


class Gun(enum.Enum):
    """Every weapon a player can hold."""

    PISTOL = "Pistol"
    SNIPER = "Sniper"
    SHOTGUN = "Shotgun"
    SUB_MACHINE_GUN = "SubMachineGun"
    ASSAULT_RIFLE = "AssaultRifle"
    MACHINE_GUN = "MachineGun"

    @property
    def _stats(self) -> _Stats:
        return _STATS[self]

    def to_held_weapon(self) -> HeldWeapon:
        """A fully loaded weapon of this kind."""
        from .components import HeldWeapon

        return HeldWeapon(gun=self, ammo=self.max_ammo())

    def range(self) -> float:
        return self._stats.range

    def damage(self) -> float:
        return self._stats.damage

    def bullet_speed(self) -> float:
        return self._stats.bullet_speed

    def dmg_drop_off(self) -> float:
        return self._stats.drop_off

    def recharge(self) -> timedelta:
        return timedelta(seconds=self._stats.recharge)

    def max_ammo(self) -> int:
        """Magazine size; zero means unlimited."""
        return self._stats.max_ammo

    def spread(self) -> float | None:
        """Maximum deviation of a shot in radians, if the gun spreads."""
        degrees = self._stats.spread
        return None if degrees is None else math.radians(degrees)

    def pellets(self) -> int:
        return self._stats.pellets

    def damage_with_drop_off(self, distance: float) -> float:
        """Damage of one pellet after travelling ``distance`` (0.0..1.0 of range)."""
        per_pellet = self.damage() / self.pellets()
        return lerp(per_pellet, per_pellet * self.dmg_drop_off(), distance)

    def __str__(self) -> str:
        return self._stats.display_name


@dataclass(frozen=True)
class _Stats:
    display_name: str
    range: float
    damage: float
    bullet_speed: float
    drop_off: float
    recharge: float
    max_ammo: int
    spread: float | None = None
    pellets: int = 1


_STATS = {
    Gun.PISTOL: _Stats("Glock 19", 10.0, 10.0, 10.0, 0.8, 0.2, 0),
    Gun.MACHINE_GUN: _Stats("M2 Browning", 10.0, 7.0, 10.0, 0.8, 0.1, 50, 2.5),
    Gun.SNIPER: _Stats("Barrett m82A1", 10.0, 40.0, 20.0, 5.0, 1.5, 5),
    Gun.SHOTGUN: _Stats("Browning BSS", 10.0, 120.0, 8.0, 0.3, 0.2, 2, 5.0, 16),
    Gun.SUB_MACHINE_GUN: _Stats("KRISS Vector", 10.0, 6.0, 10.0, 0.7, 0.05, 36, 3.0),
    Gun.ASSAULT_RIFLE: _Stats("Remington ACR", 10.0, 15.0, 12.0, 0.8, 0.15, 26, 2.0),
}

_CRATE_GUNS = (
    Gun.SNIPER,
    Gun.SHOTGUN,
    Gun.SUB_MACHINE_GUN,
    Gun.ASSAULT_RIFLE,
    Gun.MACHINE_GUN,
)


def random_gun(rng: random.Random | None = None) -> Gun:
    """Pick a random gun that can appear in a weapon crate (never the pistol)."""
    source = rng if rng is not None else random
    return _CRATE_GUNS[source.randint(0, len(_CRATE_GUNS) - 1)]