from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .geometry import Direction, clamp

log = logging.getLogger("gridtank.arena")


class ArenaError(ValueError):
    """Raised when a snapshot breaks the arena contract (missing self, out-of-bounds cells)."""


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PlayerState(_WireModel):
    x: int
    y: int
    direction: Direction
    was_hit: bool = Field(False, alias="wasHit")
    score: int = 0


class Arena(_WireModel):
    dims: List[int]
    state: Dict[str, PlayerState]

    @field_validator("dims")
    @classmethod
    def _two_positive_dims(cls, value: List[int]) -> List[int]:
        if len(value) != 2:
            raise ValueError("dims must hold exactly [width, height]")
        if any(v <= 0 for v in value):
            raise ValueError("dims must be positive")
        return value


class SelfLink(_WireModel):
    href: str


class Links(_WireModel):
    self_link: SelfLink = Field(..., alias="self")


class ArenaUpdate(_WireModel):
    links: Links = Field(..., alias="_links")
    arena: Arena

    @property
    def self_href(self) -> str:
        return self.links.self_link.href

    @property
    def width(self) -> int:
        return self.arena.dims[0]

    @property
    def height(self) -> int:
        return self.arena.dims[1]

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class OccupancyGrid:
    """Dense width x height grid of occupant hrefs, indexed [x][y]."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ArenaError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._cells: List[List[Optional[str]]] = [[None] * height for _ in range(width)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise ArenaError(f"Cell ({x}, {y}) outside {self.width}x{self.height} arena")

    def get(self, x: int, y: int) -> Optional[str]:
        self._check(x, y)
        return self._cells[x][y]

    def clamp_cell(self, x: int, y: int) -> Tuple[int, int]:
        return clamp(x, 0, self.width - 1), clamp(y, 0, self.height - 1)

    def get_clamped(self, x: int, y: int) -> Optional[str]:
        """Read a cell after pulling both coordinates back onto the grid edge."""
        cx, cy = self.clamp_cell(x, y)
        return self._cells[cx][cy]

    def place(self, x: int, y: int, href: str) -> None:
        self._check(x, y)
        self._cells[x][y] = href

    def clear(self, x: int, y: int) -> None:
        self._check(x, y)
        self._cells[x][y] = None

    def is_occupied(self, x: int, y: int) -> bool:
        return self.get(x, y) is not None

    def occupants(self) -> Iterator[Tuple[int, int, str]]:
        for x, column in enumerate(self._cells):
            for y, href in enumerate(column):
                if href is not None:
                    yield x, y, href


def project(update: ArenaUpdate) -> Tuple[OccupancyGrid, PlayerState]:
    """
    Build the occupancy grid for one decision and pull out our own state.

    Our own cell is left empty so it never blocks a scan.
    """
    href = update.self_href
    me = update.arena.state.get(href)
    if me is None:
        raise ArenaError(f"Self {href!r} missing from arena roster")
    grid = OccupancyGrid(update.width, update.height)
    for other, state in update.arena.state.items():
        grid.place(state.x, state.y, other)
    grid.clear(me.x, me.y)
    log.debug("Projected %dx%d arena with %d combatants", grid.width, grid.height, len(update.arena.state))
    return grid, me
