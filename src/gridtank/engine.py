from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Tuple

from .arena import ArenaError, ArenaUpdate, project
from .config import Policy
from .geometry import MOVEMENT_ACTIONS, Action
from .movement import HistoryRegistry, MoveHistory, evade, select_move
from .scanner import can_fire, find_threat

log = logging.getLogger("gridtank.engine")


@dataclass(frozen=True)
class Decision:
    action: Action
    reason: str
    threat: Optional[Tuple[int, int]] = None

    @property
    def code(self) -> str:
        return self.action.value


def fallback_action(rng: Optional[random.Random] = None) -> Action:
    """Uniformly random legal move so a broken snapshot never forfeits the turn."""
    return (rng or random).choice(MOVEMENT_ACTIONS)


def decide(
    update: ArenaUpdate,
    history: MoveHistory,
    policy: Optional[Policy] = None,
    rng: Optional[random.Random] = None,
) -> Decision:
    policy = policy or Policy()
    try:
        with history.locked():
            return _decide(update, history, policy)
    except ArenaError as exc:
        action = fallback_action(rng)
        log.warning("Falling back to random %s: %s", action.value, exc)
        return Decision(action=action, reason="fallback")


def _decide(update: ArenaUpdate, history: MoveHistory, policy: Policy) -> Decision:
    grid, me = project(update)

    if policy.threat_gate == "always" or me.was_hit:
        threat = find_threat(me, grid, update, policy.threat_range)
        if threat is not None:
            return Decision(action=evade(me, threat, grid, history, policy), reason="evade", threat=threat)

    if can_fire(me, grid, policy.fire_range):
        return Decision(action=Action.FIRE, reason="fire")

    move, reason = select_move(me, update.width, update.height, history, policy)
    return Decision(action=move, reason=reason)


class Bot:
    """Plays one arena snapshot at a time, keeping a move history per self href."""

    def __init__(self, policy: Optional[Policy] = None, rng: Optional[random.Random] = None):
        self.policy = policy or Policy()
        self.rng = rng or random.Random()
        self.histories = HistoryRegistry(self.policy.history_seed, self.policy.max_histories)

    def decide(self, update: ArenaUpdate) -> Decision:
        history = self.histories.get(update.self_href)
        decision = decide(update, history, self.policy, self.rng)
        log.debug("%s -> %s (%s) history=%r", update.self_href, decision.code, decision.reason, history)
        return decision

    def play(self, update: ArenaUpdate) -> str:
        return self.decide(update).code
