"""
Tests for scripted build patterns.
"""
import pytest

from streetbuilder.agent.patterns import (
    DANCE_MOVES,
    enclosure_pattern,
    get_pattern,
    loop_pattern,
    spiral_pattern,
)
from streetbuilder.world import Direction


def walk(directions, start=(0, 0)):
    position = start
    for direction in directions:
        position = direction.step(position)
    return position


def test_loop_is_closed():
    steps = loop_pattern(3)
    assert len(steps) == 12
    assert walk(step.move for step in steps) == (0, 0)
    assert all(step.clear == step.build == step.move for step in steps)


def test_spiral_leg_lengths():
    moves = [step.move for step in spiral_pattern(5)]
    assert moves == [
        Direction.EAST,
        Direction.SOUTH,
        Direction.WEST,
        Direction.WEST,
        Direction.NORTH,
        Direction.NORTH,
        Direction.EAST,
        Direction.EAST,
        Direction.EAST,
    ]


def test_enclosure_paves_outside():
    steps = enclosure_pattern(1)
    assert [step.build for step in steps] == [
        Direction.NORTH,
        Direction.EAST,
        Direction.SOUTH,
        Direction.WEST,
    ]
    assert walk(step.move for step in steps) == (0, 0)


@pytest.mark.parametrize("factory", [loop_pattern, spiral_pattern, enclosure_pattern])
def test_size_must_be_positive(factory):
    with pytest.raises(ValueError):
        factory(0)


def test_get_pattern():
    assert get_pattern("loop", 2) == loop_pattern(2)
    with pytest.raises(ValueError, match="Unknown build pattern"):
        get_pattern("zigzag", 2)


def test_dance_ends_where_it_started():
    assert len(DANCE_MOVES) == 8
    assert walk(DANCE_MOVES, (5, 5)) == (5, 5)
