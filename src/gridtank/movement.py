from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from .arena import OccupancyGrid, PlayerState
from .config import DEFAULT_HISTORY_SEED, DEFAULT_MAX_HISTORIES, Policy
from .geometry import Action, Direction

log = logging.getLogger("gridtank.movement")


class MoveHistory:
    """Two-turn sliding window of the actions we issued, most recent first."""

    def __init__(self, seed: Tuple[Action, Action] = DEFAULT_HISTORY_SEED):
        self._seed = (Action(seed[0]), Action(seed[1]))
        self.most_recent, self.second_most_recent = self._seed
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator["MoveHistory"]:
        with self._lock:
            yield self

    def push(self, action: Action) -> None:
        with self._lock:
            self.second_most_recent = self.most_recent
            self.most_recent = action

    def snapshot(self) -> Tuple[Action, Action]:
        with self._lock:
            return self.most_recent, self.second_most_recent

    def reset(self) -> None:
        with self._lock:
            self.most_recent, self.second_most_recent = self._seed

    def __repr__(self) -> str:
        return f"MoveHistory({self.most_recent.value}, {self.second_most_recent.value})"


class HistoryRegistry:
    """One MoveHistory per match key so several matches can share a process.

    Only the `max_entries` most recently used keys are kept; a key evicted
    from the registry starts again from the seed if it comes back.
    """

    def __init__(self, seed: Tuple[Action, Action] = DEFAULT_HISTORY_SEED, max_entries: int = DEFAULT_MAX_HISTORIES):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.seed = seed
        self.max_entries = max_entries
        self._histories: "OrderedDict[str, MoveHistory]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> MoveHistory:
        with self._lock:
            history = self._histories.get(key)
            if history is not None:
                self._histories.move_to_end(key)
                return history
            history = MoveHistory(self.seed)
            self._histories[key] = history
            log.debug("New move history for %s", key)
            while len(self._histories) > self.max_entries:
                evicted, _ = self._histories.popitem(last=False)
                log.debug("Evicted move history for %s", evicted)
            return history

    def __contains__(self, key: object) -> bool:
        return key in self._histories

    def __len__(self) -> int:
        return len(self._histories)


def facing_wall(me: PlayerState, width: int, height: int, margin: int = 0) -> bool:
    direction = me.direction
    if direction is Direction.WEST:
        return me.x - margin <= 0
    if direction is Direction.EAST:
        return me.x + margin >= width - 1
    if direction is Direction.NORTH:
        return me.y - margin <= 0
    return me.y + margin >= height - 1


def _room_ahead(x: int, y: int, direction: Direction, width: int, height: int) -> int:
    if direction is Direction.WEST:
        return x
    if direction is Direction.EAST:
        return width - 1 - x
    if direction is Direction.NORTH:
        return y
    return height - 1 - y


def boundary_turn(me: PlayerState, width: int, height: int, policy: Policy) -> Action:
    if policy.boundary_mode == "fixed":
        return policy.rotate
    left_room = _room_ahead(me.x, me.y, me.direction.left, width, height)
    right_room = _room_ahead(me.x, me.y, me.direction.right, width, height)
    if left_room > right_room:
        return Action.TURN_LEFT
    if right_room > left_room:
        return Action.TURN_RIGHT
    return policy.rotate


def select_move(
    me: PlayerState,
    width: int,
    height: int,
    history: MoveHistory,
    policy: Optional[Policy] = None,
) -> Tuple[Action, str]:
    """
    Pick a movement action when there is nothing to dodge or shoot.

    Walls first, then the zig-zag sweep (turn the opposite way to the turn before
    our last step), otherwise keep going. Returns the action and the rule that fired.
    """
    policy = policy or Policy()
    with history.locked():
        if facing_wall(me, width, height, policy.move_margin):
            move, reason = boundary_turn(me, width, height, policy), "boundary"
        elif history.most_recent is Action.MOVE_FORWARD:
            if history.second_most_recent is Action.TURN_LEFT:
                move = Action.TURN_RIGHT
            else:
                move = Action.TURN_LEFT
            reason = "sweep"
        else:
            move, reason = Action.MOVE_FORWARD, "advance"
        history.push(move)
    return move, reason


def evade(
    me: PlayerState,
    threat: Tuple[int, int],
    grid: OccupancyGrid,
    history: MoveHistory,
    policy: Optional[Policy] = None,
) -> Action:
    """Step out of the attacker's line, or turn so the next step does."""
    policy = policy or Policy()
    tx, ty = threat
    if tx == me.x:
        # Attacker shares our column: a sideways step clears it.
        resolving = me.direction.is_horizontal
    elif ty == me.y:
        resolving = me.direction.is_vertical
    else:
        resolving = False
    move = Action.MOVE_FORWARD if resolving else policy.rotate
    if move is Action.MOVE_FORWARD and policy.check_destination:
        dx, dy = me.direction.delta
        nx, ny = me.x + dx, me.y + dy
        if not grid.in_bounds(nx, ny) or grid.is_occupied(nx, ny):
            move = policy.rotate
    history.push(move)
    return move
