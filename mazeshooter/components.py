"""Vector maths and the components shared between server and clients."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .gun import Gun


@dataclass(frozen=True)
class Vec2:
    """An immutable two-dimensional vector."""

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_angle(cls, angle: float) -> Vec2:
        """Unit vector pointing at ``angle`` radians."""
        return cls(math.cos(angle), math.sin(angle))

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance(self, other: Vec2) -> float:
        return (self - other).length()

    def is_normalized(self) -> bool:
        return abs(self.x * self.x + self.y * self.y - 1.0) <= 1e-4

    def normalize_or_zero(self) -> Vec2:
        length = self.length()
        if length > 0.0 and math.isfinite(length):
            return Vec2(self.x / length, self.y / length)
        return Vec2()

    def perp(self) -> Vec2:
        """This vector turned a quarter turn counter-clockwise."""
        return Vec2(-self.y, self.x)

    def rotate(self, other: Vec2) -> Vec2:
        """Rotate ``other`` by the angle of this vector, scaled by its length."""
        return Vec2(
            self.x * other.x - self.y * other.y,
            self.y * other.x + self.x * other.y,
        )

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)


@dataclass
class Position:
    value: Vec2


@dataclass
class Velocity:
    value: Vec2


@dataclass
class LookDirection:
    value: Vec2


@dataclass
class Size:
    value: Vec2


@dataclass
class Health:
    value: float


@dataclass
class Kills:
    value: int = 0


@dataclass
class Deaths:
    value: int = 0


@dataclass
class HeldWeapon:
    gun: Gun
    ammo: int


@dataclass
class Bullet:
    owner: int
    gun: Gun

    @property
    def id(self) -> int:
        return self.owner


@dataclass
class WeaponCrate:
    gun: Gun


@dataclass
class DeadPlayer:
    pass


@dataclass
class Player:
    id: int
    name: str


@dataclass
class InputState:
    forward: bool = False
    backward: bool = False
    left: bool = False
    right: bool = False
    look_angle: float = 0.0
    shoot: bool = False


# Components that are replicated to clients, in registration order.
SHARED_COMPONENTS = (
    Position,
    Velocity,
    LookDirection,
    Size,
    Health,
    HeldWeapon,
    Kills,
    Deaths,
    Player,
    Bullet,
    WeaponCrate,
    DeadPlayer,
)


@dataclass
class Insert:
    """Insert (or replace) a component on an entity."""

    entity: int
    component: object


@dataclass
class Remove:
    """Remove a component type from an entity."""

    entity: int
    component_type: type = field(default=object)


@dataclass
class Despawn:
    """Remove an entity and all of its components."""

    entity: int