"""Explore page layout: branching packer, dense grid and tile assembly."""

from goat.explore.grid import GridBounds, TileGrid, compute_bounds, layout_grid
from goat.explore.positions import MANUAL_OFFSETS, generate_positions
from goat.explore.tiles import TILE_COLORS, Tile, build_explore_tiles, explore_layout

__all__ = [
    "GridBounds",
    "MANUAL_OFFSETS",
    "TILE_COLORS",
    "Tile",
    "TileGrid",
    "build_explore_tiles",
    "compute_bounds",
    "explore_layout",
    "generate_positions",
    "layout_grid",
]
