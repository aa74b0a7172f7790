from __future__ import annotations

from typing import Callable, Dict, Sequence, Tuple, Union

import pytest

from gridtank.arena import ArenaUpdate

Placement = Union[Tuple[int, int, str], Tuple[int, int, str, bool]]


def build_update(dims: Sequence[int], roster: Dict[str, Placement], me: str = "me") -> ArenaUpdate:
    state = {}
    for href, placement in roster.items():
        x, y, direction = placement[:3]
        entry = {"x": x, "y": y, "direction": direction}
        if len(placement) > 3:
            entry["wasHit"] = placement[3]
        state[href] = entry
    return ArenaUpdate.model_validate({"_links": {"self": {"href": me}}, "arena": {"dims": list(dims), "state": state}})


@pytest.fixture
def make_update() -> Callable[..., ArenaUpdate]:
    return build_update
