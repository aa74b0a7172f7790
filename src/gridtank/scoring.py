from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class Tally:
    href: str
    hits_dealt: int = 0
    times_hit: int = 0
    shots: int = 0
    blocked_moves: int = 0
    actions: Counter = field(default_factory=Counter)

    @property
    def score(self) -> int:
        return self.hits_dealt - self.times_hit

    @property
    def accuracy(self) -> float:
        return self.hits_dealt / self.shots if self.shots else 0.0

    def record(self, code: str) -> None:
        self.actions[code] += 1
        if code == "T":
            self.shots += 1


@dataclass
class MatchResult:
    turns: int
    tallies: Dict[str, Tally]

    def ranking(self) -> List[Tally]:
        return sorted(self.tallies.values(), key=lambda t: (t.score, t.hits_dealt), reverse=True)

    def rank_of(self, href: str) -> int:
        for rank, tally in enumerate(self.ranking(), start=1):
            if tally.href == href:
                return rank
        raise KeyError(href)

    def summary(self) -> List[dict]:
        participants = len(self.tallies)
        rows = []
        for rank, tally in enumerate(self.ranking(), start=1):
            rows.append(
                {
                    "rank": rank,
                    "href": tally.href,
                    "score": tally.score,
                    "hits_dealt": tally.hits_dealt,
                    "times_hit": tally.times_hit,
                    "accuracy": round(tally.accuracy, 3),
                    "rank_score": rank_score(rank, participants),
                    "actions": dict(tally.actions),
                }
            )
        return rows


def rank_score(rank: int, participants: int) -> float:
    if participants <= 1:
        return 1.0
    return (participants - rank) / (participants - 1)
