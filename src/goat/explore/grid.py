"""Dense grid materialisation for packed tile coordinates."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from goat.core.types import Coordinate
from goat.explore.positions import generate_positions

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class GridBounds:
    """Inclusive bounding box of a set of coordinates."""

    min_x: int
    max_x: int
    min_y: int
    max_y: int

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    def translate(self, coord: Coordinate) -> Coordinate:
        """Shift a coordinate so the box's top-left corner becomes (0, 0)."""
        x, y = coord
        return x - self.min_x, y - self.min_y


@dataclass(slots=True)
class TileGrid(Generic[T]):
    """Row-major dense grid; ``None`` cells are decorative placeholders."""

    width: int
    height: int
    rows: list[list[T | None]]

    def cells(self) -> list[T | None]:
        return [cell for row in self.rows for cell in row]

    def occupied(self) -> int:
        return sum(1 for cell in self.cells() if cell is not None)


def compute_bounds(positions: Sequence[Coordinate]) -> GridBounds:
    if not positions:
        raise ValueError("cannot compute bounds of an empty position list")
    xs = [x for x, _ in positions]
    ys = [y for _, y in positions]
    return GridBounds(min_x=min(xs), max_x=max(xs), min_y=min(ys), max_y=max(ys))


def layout_grid(items: Sequence[T], positions: Sequence[Coordinate] | None = None) -> TileGrid[T]:
    """Place ``items[i]`` at ``positions[i]`` inside a zero-based dense grid.

    Positions default to :func:`generate_positions` for ``len(items)``.
    """
    if positions is None:
        positions = generate_positions(len(items))
    if len(positions) != len(items):
        raise ValueError(
            f"position count ({len(positions)}) does not match item count ({len(items)})"
        )
    if not items:
        return TileGrid(width=0, height=0, rows=[])

    bounds = compute_bounds(positions)
    rows: list[list[T | None]] = [[None] * bounds.width for _ in range(bounds.height)]
    for item, coord in zip(items, positions):
        gx, gy = bounds.translate(coord)
        if rows[gy][gx] is not None:
            raise ValueError(f"coordinate {coord} is assigned to more than one item")
        rows[gy][gx] = item
    return TileGrid(width=bounds.width, height=bounds.height, rows=rows)
