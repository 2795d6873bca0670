from __future__ import annotations

import pytest

from goat.explore.positions import MANUAL_OFFSETS, NEIGHBOR_DIRECTIONS, generate_positions

TABLE = [
    (1, 0),
    (2, 0),
    (0, 1),
    (0, 2),
    (-1, 0),
    (1, -1),
    (1, -2),
    (-1, 1),
    (-1, 2),
    (2, 1),
    (-2, 0),
    (0, -1),
    (2, -1),
    (-2, 1),
    (3, 0),
    (0, 3),
    (-1, -1),
    (1, 1),
    (-2, -1),
    (3, -1),
]


def _adjacent(a: tuple[int, int], b: tuple[int, int]) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def test_offset_table_is_literal() -> None:
    assert list(MANUAL_OFFSETS) == TABLE
    assert NEIGHBOR_DIRECTIONS == ((1, 0), (-1, 0), (0, 1), (0, -1))


def test_zero_count_is_empty() -> None:
    assert generate_positions(0) == []


def test_single_item_is_origin() -> None:
    assert generate_positions(1) == [(0, 0)]


@pytest.mark.parametrize("count", range(1, 22))
def test_table_prefix_is_golden(count: int) -> None:
    assert generate_positions(count) == [(0, 0), *TABLE[: count - 1]]


@pytest.mark.parametrize("count", [0, 1, 5, 21, 22, 25, 50, 137])
def test_length_and_distinct(count: int) -> None:
    positions = generate_positions(count)
    assert len(positions) == count
    assert len(set(positions)) == count


def test_fallback_grows_from_most_recent_tile() -> None:
    positions = generate_positions(25)

    assert positions[:21] == [(0, 0), *TABLE]
    # (3, -1) was placed last and its +x side is free, so the branch keeps extending right.
    assert positions[21:] == [(4, -1), (5, -1), (6, -1), (7, -1)]
    for index in range(21, 25):
        assert any(_adjacent(positions[index], earlier) for earlier in positions[:index])


def test_every_fallback_tile_touches_an_earlier_tile() -> None:
    positions = generate_positions(120)
    for index in range(21, len(positions)):
        assert any(_adjacent(positions[index], earlier) for earlier in positions[:index])


def test_deterministic_and_prefix_stable() -> None:
    assert generate_positions(40) == generate_positions(40)
    previous: list[tuple[int, int]] = []
    for count in range(0, 60):
        current = generate_positions(count)
        assert current[: len(previous)] == previous
        previous = current


def test_rejects_negative_count() -> None:
    with pytest.raises(ValueError, match="non-negative"):
        generate_positions(-1)


@pytest.mark.parametrize("bad", [2.0, "3", None, True])
def test_rejects_non_integer_count(bad: object) -> None:
    with pytest.raises(TypeError):
        generate_positions(bad)  # type: ignore[arg-type]
