"""Random maze generation on a grid of cells."""

from __future__ import annotations

import enum
import random


class OpenWalls(enum.IntFlag):
    """Which sides of a maze cell lead to a neighbour."""

    UP = 0b0001
    DOWN = 0b0010
    LEFT = 0b0100
    RIGHT = 0b1000

    def opposite(self) -> OpenWalls:
        """Swap UP with DOWN and LEFT with RIGHT."""
        up_left = int(self & (OpenWalls.UP | OpenWalls.LEFT)) << 1
        down_right = int(self & (OpenWalls.DOWN | OpenWalls.RIGHT)) >> 1
        return OpenWalls(up_left | down_right)


class Maze:
    """A perfect maze: every cell is reachable along exactly one path.

    ``branching`` near 1.0 produces long corridors, near 0.0 many short branches.
    """

    def __init__(
        self,
        width: int,
        height: int,
        branching: float,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= branching <= 1.0:
            raise ValueError(f"branching must be within 0.0..=1.0, got {branching}")
        if width < 1 or height < 1:
            raise ValueError(f"maze must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height
        self.branching = branching
        self._cells = [OpenWalls(0)] * (width * height)
        self._generate(rng if rng is not None else random)

    def cell(self, x: int, y: int) -> OpenWalls:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} maze")
        return self._cells[y * self.width + x]

    def _generate(self, rng) -> None:
        stack = [(rng.randrange(self.width), rng.randrange(self.height))]

        while stack:
            if rng.random() < self.branching:
                cx, cy = stack.pop()
            else:
                cx, cy = stack.pop(rng.randrange(len(stack)))

            candidates = []
            if cy > 0:
                candidates.append((cx, cy - 1, OpenWalls.UP))
            if cy + 1 < self.height:
                candidates.append((cx, cy + 1, OpenWalls.DOWN))
            if cx > 0:
                candidates.append((cx - 1, cy, OpenWalls.LEFT))
            if cx + 1 < self.width:
                candidates.append((cx + 1, cy, OpenWalls.RIGHT))

            opened = [
                (nx, ny)
                for nx, ny, direction in candidates
                if self._tunnel(cx, cy, nx, ny, direction)
            ]
            rng.shuffle(opened)
            stack.extend(opened)

    def _tunnel(self, cx: int, cy: int, nx: int, ny: int, direction: OpenWalls) -> bool:
        target = ny * self.width + nx
        if self._cells[target]:
            return False
        current = cy * self.width + cx
        self._cells[current] |= direction
        self._cells[target] |= direction.opposite()
        return True