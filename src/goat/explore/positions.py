"""Branching tile-grid packer for the explore page.

Positions start from a hand-authored offset table that reads like crossing
scrabble words. Once the table runs out, the shape keeps growing from the most
recently placed tile outward through its axis-aligned neighbours.
"""

from __future__ import annotations

from goat.core.types import Coordinate

ORIGIN: Coordinate = (0, 0)

# Literal aesthetic constant: changing any entry changes the explore silhouette.
MANUAL_OFFSETS: tuple[Coordinate, ...] = (
    # first branch going right
    (1, 0),
    (2, 0),
    # down from centre
    (0, 1),
    (0, 2),
    # left
    (-1, 0),
    # up from the right tile
    (1, -1),
    (1, -2),
    # down from the left tile
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
)

# +x, -x, +y, -y
NEIGHBOR_DIRECTIONS: tuple[Coordinate, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def generate_positions(count: int) -> list[Coordinate]:
    """Return ``count`` distinct grid coordinates, origin first.

    The result for ``n`` items is always a prefix of the result for ``n + 1``.
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise TypeError(f"count must be an int, got {type(count).__name__}")
    if count < 0:
        raise ValueError("count must be non-negative")
    if count == 0:
        return []

    positions: list[Coordinate] = [ORIGIN]
    occupied: set[Coordinate] = {ORIGIN}

    for offset in MANUAL_OFFSETS[: count - 1]:
        positions.append(offset)
        occupied.add(offset)

    while len(positions) < count:
        candidate = _next_frontier_cell(positions, occupied)
        positions.append(candidate)
        occupied.add(candidate)

    return positions


def _next_frontier_cell(positions: list[Coordinate], occupied: set[Coordinate]) -> Coordinate:
    """First free neighbour of the most recently placed tile that has one."""
    for x, y in reversed(positions):
        for dx, dy in NEIGHBOR_DIRECTIONS:
            cell = (x + dx, y + dy)
            if cell not in occupied:
                return cell
    # Unreachable on an unbounded lattice: the outermost tile always has a free side.
    raise RuntimeError("no free neighbour found")
