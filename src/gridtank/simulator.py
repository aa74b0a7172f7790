"""
Local referee for playing the bot against scripted opponents.

Every combatant decides from the same snapshot; shots resolve first, then
turns and moves in roster order. A hit marks the target as wasHit for the
following snapshot.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .arena import ArenaUpdate, PlayerState
from .engine import Bot
from .geometry import MOVEMENT_ACTIONS, Action, Direction
from .scoring import MatchResult, Tally

log = logging.getLogger("gridtank.simulator")

SHOT_RANGE = 3
SELF_HREF = "https://gridtank.local/self"

Player = Callable[[ArenaUpdate], str]


def _first_in_lane(state: PlayerState, positions: Dict[Tuple[int, int], str], width: int, height: int) -> Optional[str]:
    dx, dy = state.direction.delta
    for distance in range(1, SHOT_RANGE + 1):
        x, y = state.x + dx * distance, state.y + dy * distance
        if not (0 <= x < width and 0 <= y < height):
            return None
        target = positions.get((x, y))
        if target is not None:
            return target
    return None


def spinner(update: ArenaUpdate) -> str:
    return Action.TURN_RIGHT.value


def sitter(update: ArenaUpdate) -> str:
    return Action.FIRE.value


def rammer(update: ArenaUpdate) -> str:
    """Shoot anything in the lane, otherwise charge ahead and turn right at walls."""
    me = update.arena.state[update.self_href]
    positions = {(s.x, s.y): href for href, s in update.arena.state.items() if href != update.self_href}
    if _first_in_lane(me, positions, update.width, update.height):
        return Action.FIRE.value
    dx, dy = me.direction.delta
    nx, ny = me.x + dx, me.y + dy
    if not (0 <= nx < update.width and 0 <= ny < update.height) or (nx, ny) in positions:
        return Action.TURN_RIGHT.value
    return Action.MOVE_FORWARD.value


def random_player(seed: Optional[int] = None) -> Player:
    rng = random.Random(seed)

    def play(update: ArenaUpdate) -> str:
        return rng.choice((*MOVEMENT_ACTIONS, Action.FIRE)).value

    return play


OPPONENTS: Dict[str, Callable[[Optional[int]], Player]] = {
    "spinner": lambda seed: spinner,
    "sitter": lambda seed: sitter,
    "rammer": lambda seed: rammer,
    "random": random_player,
}


@dataclass
class Referee:
    width: int
    height: int
    states: Dict[str, PlayerState]

    def snapshot(self, href: str) -> ArenaUpdate:
        return ArenaUpdate.model_validate(
            {
                "_links": {"self": {"href": href}},
                "arena": {
                    "dims": [self.width, self.height],
                    "state": {k: v.model_copy() for k, v in self.states.items()},
                },
            }
        )

    def apply(self, actions: Dict[str, str], tallies: Dict[str, Tally]) -> None:
        positions = {(s.x, s.y): href for href, s in self.states.items()}
        hit: List[str] = []
        for href, code in actions.items():
            tallies[href].record(code)
            if code != Action.FIRE.value:
                continue
            target = _first_in_lane(self.states[href], positions, self.width, self.height)
            if target is not None:
                tallies[href].hits_dealt += 1
                tallies[target].times_hit += 1
                hit.append(target)

        for href, code in actions.items():
            state = self.states[href]
            if code in (Action.TURN_LEFT.value, Action.TURN_RIGHT.value):
                state.direction = state.direction.rotated(Action(code))
            elif code == Action.MOVE_FORWARD.value:
                dx, dy = state.direction.delta
                nx, ny = state.x + dx, state.y + dy
                occupied = any(s.x == nx and s.y == ny for s in self.states.values())
                if 0 <= nx < self.width and 0 <= ny < self.height and not occupied:
                    state.x, state.y = nx, ny
                else:
                    tallies[href].blocked_moves += 1

        for href, state in self.states.items():
            state.was_hit = href in hit
            state.score = tallies[href].score


def _spawn(width: int, height: int, hrefs: List[str], rng: random.Random) -> Dict[str, PlayerState]:
    if len(hrefs) > width * height:
        raise ValueError(f"{len(hrefs)} combatants do not fit in a {width}x{height} arena")
    cells = rng.sample([(x, y) for x in range(width) for y in range(height)], len(hrefs))
    directions = list(Direction)
    return {
        href: PlayerState(x=x, y=y, direction=rng.choice(directions))
        for href, (x, y) in zip(hrefs, cells)
    }


def run_match(
    bot: Bot,
    opponents: Dict[str, Player],
    width: int = 8,
    height: int = 6,
    turns: int = 100,
    seed: Optional[int] = None,
) -> MatchResult:
    """Play `turns` rounds between the bot and the given opponents on a fresh arena."""
    rng = random.Random(seed)
    players: Dict[str, Player] = {SELF_HREF: bot.play, **opponents}
    referee = Referee(width=width, height=height, states=_spawn(width, height, list(players), rng))
    tallies = {href: Tally(href=href) for href in players}
    for turn in range(turns):
        actions = {href: player(referee.snapshot(href)) for href, player in players.items()}
        log.debug("turn %d: %s", turn, actions)
        referee.apply(actions, tallies)
    return MatchResult(turns=turns, tallies=tallies)


def opponent_roster(names: List[str], seed: Optional[int] = None) -> Dict[str, Player]:
    roster: Dict[str, Player] = {}
    for idx, name in enumerate(names):
        factory = OPPONENTS.get(name)
        if factory is None:
            raise KeyError(f"Unknown opponent {name!r}; choose from {', '.join(sorted(OPPONENTS))}")
        roster[f"https://gridtank.local/{name}-{idx}"] = factory(None if seed is None else seed + idx)
    return roster

