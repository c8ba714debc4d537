"""The tile map that the game is played on."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass, field
from typing import Union

from .components import Position, Vec2
from .defaults import (
    MAP_BRANCHING,
    MAP_DEFAULT_WALL,
    MAP_OPENNESS,
    MAP_SECTOR_COUNT,
    MAP_SECTOR_MAX_SIZE,
    MAP_SECTOR_MIN_SIZE,
)
from .maze import Maze, OpenWalls


class Textured(enum.Enum):
    BRICK1 = "Brick1"
    BRICK2 = "Brick2"
    DOOR = "Door"
    INDUSTRIAL = "Industrial"
    ROCKY = "Rocky"
    TECHY = "Techy"
    URBAN = "Urban"
    WOOD = "Wood"


DEFAULT_WALL_TEXTURE = Textured[MAP_DEFAULT_WALL]

_RANDOM_TEXTURES = (
    Textured.BRICK1,
    Textured.BRICK2,
    Textured.INDUSTRIAL,
    Textured.ROCKY,
    Textured.TECHY,
    Textured.URBAN,
    Textured.WOOD,
)


def random_texture(rng: random.Random | None = None) -> Textured:
    """Pick a random wall texture; doors are never chosen."""
    source = rng if rng is not None else random
    return _RANDOM_TEXTURES[source.randint(0, len(_RANDOM_TEXTURES) - 1)]


@dataclass(frozen=True)
class Empty:
    """A cell that can be walked through."""


@dataclass(frozen=True)
class SolidColor:
    """A wall painted in a single RGB colour."""

    color: tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class TexturedWall:
    """A wall drawn with a texture."""

    texture: Textured


MapCell = Union[Empty, SolidColor, TexturedWall]

EMPTY = Empty()

_LAYOUT = (
    "##########",
    "#.#......#",
    "#.#......#",
    "#.#...#.##",
    "#.....#..#",
    "#.....#..#",
    "#.....#..#",
    "#..#..#..#",
    "#.....#..#",
    "#########W",
)


@dataclass
class Map:
    """A rectangular grid of cells, stored row by row."""

    width: int
    height: int
    cells: list = field(default_factory=list)

    @classmethod
    def blank(cls, width: int, height: int) -> Map:
        return cls(width, height, [EMPTY] * (width * height))

    @classmethod
    def default(cls) -> Map:
        """A small fixed test map."""
        legend = {
            "#": TexturedWall(DEFAULT_WALL_TEXTURE),
            ".": EMPTY,
            "W": SolidColor((1.0, 1.0, 1.0)),
        }
        cells = [legend[ch] for row in _LAYOUT for ch in row]
        return cls(len(_LAYOUT[0]), len(_LAYOUT), cells)

    @classmethod
    def from_maze(cls, maze: Maze) -> Map:
        """Carve a maze into a map of walls, one map cell per maze cell and wall."""
        game_map = cls(
            maze.width * 2 + 1,
            maze.height * 2 + 1,
            [TexturedWall(DEFAULT_WALL_TEXTURE)] * ((maze.width * 2 + 1) * (maze.height * 2 + 1)),
        )
        for maze_y in range(maze.height):
            for maze_x in range(maze.width):
                map_x = maze_x * 2 + 1
                map_y = maze_y * 2 + 1
                game_map.set_cell(map_x, map_y, EMPTY)

                walls = maze.cell(maze_x, maze_y)
                if OpenWalls.UP in walls:
                    game_map.set_cell(map_x, map_y - 1, EMPTY)
                if OpenWalls.DOWN in walls:
                    game_map.set_cell(map_x, map_y + 1, EMPTY)
                if OpenWalls.LEFT in walls:
                    game_map.set_cell(map_x - 1, map_y, EMPTY)
                if OpenWalls.RIGHT in walls:
                    game_map.set_cell(map_x + 1, map_y, EMPTY)
        return game_map

    @classmethod
    def generate(cls, width: int, height: int, rng: random.Random | None = None) -> Map:
        """Generate an opened-up maze map with a few differently textured sectors."""
        if width < 3 or width % 2 == 0:
            raise ValueError(f"map width must be odd and at least 3, got {width}")
        if height < 3 or height % 2 == 0:
            raise ValueError(f"map height must be odd and at least 3, got {height}")
        source = rng if rng is not None else random

        game_map = cls.from_maze(Maze(width // 2, height // 2, MAP_BRANCHING, source))

        # Knock out some of the inner walls to make the map more open.
        inner_walls = [
            (x, y)
            for y in range(1, game_map.height - 1)
            for x in range(1 + y % 2, game_map.width - 1, 2)
            if game_map.cell(x, y) != EMPTY
        ]
        to_remove = int(len(inner_walls) * MAP_OPENNESS)
        for x, y in source.sample(inner_walls, to_remove):
            game_map.set_cell(x, y, EMPTY)

        # Give some areas of the map a different wall texture.
        for _ in range(MAP_SECTOR_COUNT):
            texture = random_texture(source)
            while texture is DEFAULT_WALL_TEXTURE:
                texture = random_texture(source)

            sector_w = source.randrange(MAP_SECTOR_MIN_SIZE, MAP_SECTOR_MAX_SIZE)
            sector_h = source.randrange(MAP_SECTOR_MIN_SIZE, MAP_SECTOR_MAX_SIZE)
            left = source.randint(0, max(0, game_map.width - sector_w))
            top = source.randint(0, max(0, game_map.height - sector_h))

            for y in range(top, min(top + sector_h, game_map.height)):
                for x in range(left, min(left + sector_w, game_map.width)):
                    if isinstance(game_map.cell(x, y), TexturedWall):
                        game_map.set_cell(x, y, TexturedWall(texture))

        return game_map

    def cell(self, x: int, y: int) -> MapCell:
        """The cell at (x, y); anything outside the map is empty."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            return EMPTY
        return self.cells[y * self.width + x]

    def set_cell(self, x: int, y: int, value: MapCell) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} map")
        self.cells[y * self.width + x] = value

    def render(self) -> str:
        """ASCII picture of the map: 'X' for walls, a space for empty cells."""
        rows = (
            "".join(
                " " if self.cell(x, y) == EMPTY else "X" for x in range(self.width)
            )
            for y in range(self.height)
        )
        return "".join(row + "\n" for row in rows)

    def random_empty_spot(self, rng: random.Random | None = None) -> Position | None:
        """Centre of a random empty cell, or None if there is none."""
        spots = [
            Position(Vec2(x + 0.5, y + 0.5))
            for x in range(self.width)
            for y in range(self.height)
            if self.cell(x, y) == EMPTY
        ]
        if not spots:
            return None
        source = rng if rng is not None else random
        return source.choice(spots)