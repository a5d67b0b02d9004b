import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from asciifier.errors import OutOfBoundsContractViolation
from asciifier.glyph_atlas import GlyphAtlas
from asciifier.grid import TileGrid

log = logging.getLogger(__name__)


def _window(cell_width: int, cell_height: int, luminance: np.ndarray, x0: int, y0: int) -> tuple[int, int]:
    """Overlap of a cell placed at (x0, y0) with the source, as (height, width)."""
    if x0 < 0 or y0 < 0:
        raise OutOfBoundsContractViolation(f"Negative tile origin ({x0}, {y0})")
    h = min(cell_height, luminance.shape[0] - y0)
    w = min(cell_width, luminance.shape[1] - x0)
    if h <= 0 or w <= 0:
        raise OutOfBoundsContractViolation(
            f"Tile origin ({x0}, {y0}) outside {luminance.shape[1]}x{luminance.shape[0]} source"
        )
    return h, w


def mean_abs_diff(
    glyph: np.ndarray, luminance: np.ndarray, x0: int, y0: int, cell_width: int, cell_height: int
) -> float:
    """Mean absolute luminance difference between a glyph's cell window and the source at (x0, y0).

    Only the glyph's top-left cell_width x cell_height window is scored, and
    only where it overlaps the source, so edge tiles are scored over their
    clipped region.
    """
    if cell_width > glyph.shape[1] or cell_height > glyph.shape[0]:
        raise OutOfBoundsContractViolation(f"Cell {cell_width}x{cell_height} exceeds glyph {glyph.shape[::-1]}")
    h, w = _window(cell_width, cell_height, luminance, x0, y0)
    region = luminance[y0 : y0 + h, x0 : x0 + w].astype(np.int64)
    return float(np.abs(glyph[:h, :w] - region).sum()) / (h * w)


def _difference_sums(atlas: GlyphAtlas, luminance: np.ndarray, x0: int, y0: int) -> tuple[np.ndarray, int]:
    """Summed absolute differences for every atlas cell against one tile, plus the sample count."""
    h, w = _window(atlas.cell_width, atlas.cell_height, luminance, x0, y0)
    region = luminance[y0 : y0 + h, x0 : x0 + w].astype(np.int64)
    return np.abs(atlas.cells[:, :h, :w] - region).sum(axis=(1, 2)), h * w


def tile_scores(atlas: GlyphAtlas, luminance: np.ndarray, x0: int, y0: int) -> np.ndarray:
    """Mean absolute difference of every atlas entry against the tile at (x0, y0)."""
    sums, count = _difference_sums(atlas, luminance, x0, y0)
    return sums / count


def select_glyph(atlas: GlyphAtlas, luminance: np.ndarray, x0: int, y0: int) -> int:
    """Index of the atlas entry closest to the tile at (x0, y0).

    Sums are compared as exact integers; the sample count is shared by every
    candidate, so the lowest sum is the lowest mean. Ties go to the earliest
    entry.
    """
    sums, _ = _difference_sums(atlas, luminance, x0, y0)
    return int(np.argmin(sums))


def match_tiles(atlas: GlyphAtlas, luminance: np.ndarray, workers: int | None = None) -> np.ndarray:
    """Pick the best glyph for every tile of the source.

    Columns of tiles are scored on a thread pool; each job reads only shared
    read-only inputs and returns its own results.

    Returns:
        intp array of shape (rows, columns) holding atlas indices
    """
    grid = TileGrid(luminance.shape[1], luminance.shape[0], atlas.cell_width, atlas.cell_height)

    def match_column(col: int) -> list[int]:
        return [select_glyph(atlas, luminance, x0, y0) for x0, y0 in grid.column(col)]

    log.debug("Matching %dx%d tiles against %d glyphs", grid.columns, grid.rows, len(atlas))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        columns = list(pool.map(match_column, range(grid.columns)))

    return np.array(columns, dtype=np.intp).reshape(grid.columns, grid.rows).T.copy()
