from __future__ import annotations

from enum import Enum
from typing import Tuple


class Direction(str, Enum):
    NORTH = "N"
    SOUTH = "S"
    EAST = "E"
    WEST = "W"

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITE[self]

    @property
    def delta(self) -> Tuple[int, int]:
        """Unit step for one cell along this facing; y grows towards the south."""
        return _DELTA[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.EAST, Direction.WEST)

    @property
    def is_vertical(self) -> bool:
        return not self.is_horizontal

    @property
    def left(self) -> "Direction":
        return _LEFT[self]

    @property
    def right(self) -> "Direction":
        return _RIGHT[self]

    def rotated(self, action: "Action") -> "Direction":
        if action is Action.TURN_LEFT:
            return self.left
        if action is Action.TURN_RIGHT:
            return self.right
        return self


class Action(str, Enum):
    TURN_LEFT = "L"
    TURN_RIGHT = "R"
    MOVE_FORWARD = "F"
    FIRE = "T"

    @property
    def is_turn(self) -> bool:
        return self in (Action.TURN_LEFT, Action.TURN_RIGHT)

    @property
    def other_turn(self) -> "Action":
        if self is Action.TURN_LEFT:
            return Action.TURN_RIGHT
        if self is Action.TURN_RIGHT:
            return Action.TURN_LEFT
        raise ValueError(f"{self.value!r} is not a turn")


MOVEMENT_ACTIONS: Tuple[Action, ...] = (Action.TURN_LEFT, Action.TURN_RIGHT, Action.MOVE_FORWARD)

_OPPOSITE = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}
_DELTA = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}
_LEFT = {
    Direction.NORTH: Direction.WEST,
    Direction.WEST: Direction.SOUTH,
    Direction.SOUTH: Direction.EAST,
    Direction.EAST: Direction.NORTH,
}
_RIGHT = {v: k for k, v in _LEFT.items()}


def clamp(value: int, low: int, high: int) -> int:
    return min(max(value, low), high)
