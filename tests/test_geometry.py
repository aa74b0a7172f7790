"""Tests for gridtank.geometry."""

from __future__ import annotations

import pytest

from gridtank.geometry import MOVEMENT_ACTIONS, Action, Direction, clamp


class TestDirection:
    def test_parses_wire_codes(self) -> None:
        assert Direction("N") is Direction.NORTH
        assert Direction("W") is Direction.WEST

    def test_opposites_pair_up(self) -> None:
        for direction in Direction:
            assert direction.opposite.opposite is direction
            assert direction.opposite is not direction
        assert Direction.EAST.opposite is Direction.WEST

    def test_north_decrements_y(self) -> None:
        assert Direction.NORTH.delta == (0, -1)
        assert Direction.SOUTH.delta == (0, 1)
        assert Direction.WEST.delta == (-1, 0)
        assert Direction.EAST.delta == (1, 0)

    def test_axes(self) -> None:
        assert Direction.EAST.is_horizontal and Direction.WEST.is_horizontal
        assert Direction.NORTH.is_vertical and Direction.SOUTH.is_vertical
        assert not Direction.NORTH.is_horizontal

    def test_rotations(self) -> None:
        assert Direction.NORTH.left is Direction.WEST
        assert Direction.NORTH.right is Direction.EAST
        for direction in Direction:
            assert direction.left.right is direction
            assert direction.left.left is direction.opposite

    def test_rotated_by_action(self) -> None:
        assert Direction.SOUTH.rotated(Action.TURN_LEFT) is Direction.EAST
        assert Direction.SOUTH.rotated(Action.TURN_RIGHT) is Direction.WEST
        assert Direction.SOUTH.rotated(Action.MOVE_FORWARD) is Direction.SOUTH


class TestAction:
    def test_codes(self) -> None:
        assert [a.value for a in Action] == ["L", "R", "F", "T"]

    def test_movement_set_excludes_fire(self) -> None:
        assert Action.FIRE not in MOVEMENT_ACTIONS
        assert set(MOVEMENT_ACTIONS) == {Action.TURN_LEFT, Action.TURN_RIGHT, Action.MOVE_FORWARD}

    def test_other_turn(self) -> None:
        assert Action.TURN_LEFT.other_turn is Action.TURN_RIGHT
        assert Action.TURN_RIGHT.other_turn is Action.TURN_LEFT
        with pytest.raises(ValueError):
            Action.FIRE.other_turn


def test_clamp() -> None:
    assert clamp(-2, 0, 4) == 0
    assert clamp(7, 0, 4) == 4
    assert clamp(3, 0, 4) == 3
