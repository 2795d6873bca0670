"""Explore page tiles: the goat, every shipped feature, and a build-in-progress marker."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

from goat.core.types import Feature
from goat.explore.grid import TileGrid, layout_grid

TileKind = Literal["goat", "feature", "building"]

TILE_COLORS: tuple[str, ...] = (
    "#FF6B6B",  # coral red
    "#4ECDC4",  # teal
    "#FFE66D",  # yellow
    "#95E1D3",  # mint
    "#F38181",  # salmon
    "#AA96DA",  # lavender
    "#FCBAD3",  # pink
    "#A8D8EA",  # sky blue
    "#FF9F43",  # orange
    "#6BCB77",  # green
)

GOAT_EMOJI = "\U0001F410"
BUILDING_EMOJI = "✨"


@dataclass(slots=True, frozen=True)
class Tile:
    """Occupied explore-grid cell."""

    kind: TileKind
    emoji: str | None = None
    title: str | None = None
    href: str | None = None
    day: int | None = None
    color: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.kind}
        for key in ("emoji", "title", "href", "day", "color"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


def build_explore_tiles(features: Iterable[Feature], *, is_building: bool = False) -> list[Tile]:
    """Goat tile first, then features by day, then the building marker if a build runs."""
    ordered = sorted(features, key=lambda feature: feature.day)
    tiles = [Tile(kind="goat", emoji=GOAT_EMOJI, title="The Goat", href="/")]
    for index, feature in enumerate(ordered):
        tiles.append(
            Tile(
                kind="feature",
                emoji=feature.emoji,
                title=feature.title,
                href=f"/feature/{feature.id}",
                day=feature.day,
                color=TILE_COLORS[index % len(TILE_COLORS)],
            )
        )
    if is_building:
        tiles.append(Tile(kind="building", emoji=BUILDING_EMOJI))
    return tiles


def explore_layout(features: Iterable[Feature], *, is_building: bool = False) -> TileGrid[Tile]:
    return layout_grid(build_explore_tiles(features, is_building=is_building))


def grid_payload(grid: TileGrid[Tile]) -> dict[str, Any]:
    """JSON shape consumed by the explore page renderer."""
    return {
        "width": grid.width,
        "height": grid.height,
        "tiles": grid.occupied(),
        "rows": [[cell.to_payload() if cell else None for cell in row] for row in grid.rows],
    }


def render_ascii(grid: TileGrid[Tile]) -> str:
    """Compact text rendering used by the CLI: G goat, * building, day mod 100 for features."""
    lines = []
    for row in grid.rows:
        cells = []
        for cell in row:
            if cell is None:
                cells.append(" .")
            elif cell.kind == "goat":
                cells.append(" G")
            elif cell.kind == "building":
                cells.append(" *")
            else:
                cells.append(f"{(cell.day or 0) % 100:>2d}")
        lines.append(" ".join(cells))
    return "\n".join(lines)
