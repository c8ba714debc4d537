"""Components that exist only on the server and are never replicated."""

from __future__ import annotations

from dataclasses import dataclass

from .timer import Timer


@dataclass
class Speed:
    """Movement speed in map cells per second."""

    value: float


@dataclass
class ShotBy:
    """Id of the player who last hit this one, if any."""

    id: int | None = None


class ShootCooldown(Timer):
    """Prevents an entity from shooting until it runs out."""


class BulletDespawn(Timer):
    """Removes a bullet once its range has been travelled."""


class CorpseTimer(Timer):
    """Removes a dead-player marker after its animation."""