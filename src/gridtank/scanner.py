from __future__ import annotations

import logging
from typing import Optional, Tuple

from .arena import ArenaUpdate, OccupancyGrid, PlayerState
from .geometry import Direction

log = logging.getLogger("gridtank.scanner")

DEFAULT_RANGE = 3

# Probe order per distance: west, east, north, south.
THREAT_SCAN_ORDER: Tuple[Direction, ...] = (Direction.WEST, Direction.EAST, Direction.NORTH, Direction.SOUTH)


def find_threat(
    me: PlayerState,
    grid: OccupancyGrid,
    update: ArenaUpdate,
    scan_range: int = DEFAULT_RANGE,
) -> Optional[Tuple[int, int]]:
    """
    Return the cell of a combatant that can hit us this turn, or None.

    A combatant found towards the west only counts when it faces east (and so on);
    lookups past the arena edge re-check the edge cell.
    """
    for distance in range(1, scan_range + 1):
        for towards in THREAT_SCAN_ORDER:
            dx, dy = towards.delta
            x, y = grid.clamp_cell(me.x + dx * distance, me.y + dy * distance)
            occupant = grid.get_clamped(x, y)
            if occupant is None:
                continue
            enemy = update.arena.state.get(occupant)
            if enemy is not None and enemy.direction is towards.opposite:
                log.debug("Threat from %s at (%d, %d) facing %s", occupant, x, y, enemy.direction.value)
                return x, y
    return None


def can_fire(me: PlayerState, grid: OccupancyGrid, fire_range: int = DEFAULT_RANGE) -> bool:
    """True if any combatant sits in our firing lane within range, whatever it faces."""
    dx, dy = me.direction.delta
    for distance in range(1, fire_range + 1):
        if grid.get_clamped(me.x + dx * distance, me.y + dy * distance) is not None:
            return True
    return False
