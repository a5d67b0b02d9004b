import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from PIL import Image

from asciifier.errors import OutOfBoundsContractViolation
from asciifier.glyph_atlas import GlyphAtlas
from asciifier.grid import TileGrid

log = logging.getLogger(__name__)

BACKGROUND = (0, 0, 0)


def mean_colour(colour: np.ndarray, x0: int, y0: int, width: int, height: int) -> tuple[int, int, int]:
    """Average RGB of a tile region, clipped to the image and truncated to 8 bits."""
    h = min(height, colour.shape[0] - y0)
    w = min(width, colour.shape[1] - x0)
    if x0 < 0 or y0 < 0 or h <= 0 or w <= 0:
        raise OutOfBoundsContractViolation(f"Empty colour region at ({x0}, {y0})")
    totals = colour[y0 : y0 + h, x0 : x0 + w, :3].sum(axis=(0, 1), dtype=np.float64)
    r, g, b = (int(t / (h * w)) for t in totals)
    return r, g, b


def _to_8bit(cell: np.ndarray) -> np.ndarray:
    return (cell >> 8).astype(np.uint8)


def greyscale(cell: np.ndarray) -> np.ndarray:
    """Glyph luminance as opaque grey RGB."""
    grey = _to_8bit(cell)
    return np.repeat(grey[:, :, np.newaxis], 3, axis=2)


def tint(cell: np.ndarray, colour: tuple[int, int, int]) -> np.ndarray:
    """Multiply a flat colour onto the glyph.

    Glyph luminance acts as the mask: white samples take the full colour,
    black samples stay black.
    """
    grey = _to_8bit(cell).astype(np.uint32)[:, :, np.newaxis]
    fill = np.asarray(colour, dtype=np.uint32)
    return ((grey * fill + 127) // 255).astype(np.uint8)


def render(
    atlas: GlyphAtlas,
    selections: np.ndarray,
    colour_source: np.ndarray,
    colour_enabled: bool = False,
    workers: int | None = None,
) -> Image.Image:
    """Composite the selected glyphs into a new RGB canvas the size of the source.

    Each tile writes only its own clipped rectangle, so columns are drawn in
    parallel without locking.
    """
    height, width = colour_source.shape[:2]
    grid = TileGrid(width, height, atlas.cell_width, atlas.cell_height)
    if selections.shape != (grid.rows, grid.columns):
        raise OutOfBoundsContractViolation(
            f"Selections {selections.shape} do not match a {grid.rows}x{grid.columns} tile grid"
        )

    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:, :] = BACKGROUND

    def draw_column(col: int) -> None:
        for row, (x0, y0) in enumerate(grid.column(col)):
            w, h = grid.extent(x0, y0)
            cell = atlas.cells[selections[row, col], :h, :w]
            if colour_enabled:
                canvas[y0 : y0 + h, x0 : x0 + w] = tint(cell, mean_colour(colour_source, x0, y0, w, h))
            else:
                canvas[y0 : y0 + h, x0 : x0 + w] = greyscale(cell)

    log.debug("Drawing %dx%d tiles (colour=%s)", grid.columns, grid.rows, colour_enabled)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(draw_column, range(grid.columns)))

    return Image.fromarray(canvas)
