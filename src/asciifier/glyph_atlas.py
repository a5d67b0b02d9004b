import logging
import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from asciifier.errors import EmptyRepertoireError, FontLoadError, OutOfBoundsContractViolation

log = logging.getLogger(__name__)

MAX_LUMINANCE = 65535

# 8-bit rasterizer output widened to 16 bits: 255 * 257 == 65535
_WIDEN = MAX_LUMINANCE // 255


@dataclass(frozen=True, eq=False)
class GlyphBitmap:
    char: str
    inverted: bool
    pixels: np.ndarray  # (height, width) uint16, read-only

    def __post_init__(self):
        pixels = np.array(self.pixels, dtype=np.uint16)
        if pixels.ndim != 2 or pixels.shape[0] < 1 or pixels.shape[1] < 1:
            raise ValueError(f"Glyph bitmap for {self.char!r} must be a non-empty 2D array, got {pixels.shape}")
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    def invert(self) -> "GlyphBitmap":
        """Same character with every sample replaced by MAX_LUMINANCE - value."""
        return GlyphBitmap(self.char, not self.inverted, MAX_LUMINANCE - self.pixels)

    def cell(self, cell_width: int, cell_height: int) -> np.ndarray:
        """Top-left cell_width x cell_height window of the bitmap."""
        if cell_width > self.width or cell_height > self.height:
            raise OutOfBoundsContractViolation(
                f"Cell {cell_width}x{cell_height} exceeds glyph {self.char!r} ({self.width}x{self.height})"
            )
        return self.pixels[:cell_height, :cell_width]


class GlyphAtlas:
    """Ordered, immutable collection of glyph bitmaps.

    The tile grid is defined by the smallest glyph width and height in the
    collection, so every candidate covers a whole cell.
    """

    def __init__(self, glyphs: Iterable[GlyphBitmap]):
        self.glyphs = tuple(glyphs)
        if not self.glyphs:
            raise EmptyRepertoireError("Glyph atlas needs at least one bitmap")
        self.cell_width = min(g.width for g in self.glyphs)
        self.cell_height = min(g.height for g in self.glyphs)

        # (num_glyphs, cell_h, cell_w), shared read-only by every tile job
        cells = np.stack([g.cell(self.cell_width, self.cell_height) for g in self.glyphs])
        cells.flags.writeable = False
        self.cells = cells

    @classmethod
    def from_bitmaps(cls, bitmaps: Iterable[tuple[str, np.ndarray]]) -> "GlyphAtlas":
        """Build an atlas from (char, pixels) pairs, appending inverted variants after the originals."""
        originals = [GlyphBitmap(char, False, pixels) for char, pixels in bitmaps]
        return cls(originals + [g.invert() for g in originals])

    def __len__(self) -> int:
        return len(self.glyphs)

    def __getitem__(self, index: int) -> GlyphBitmap:
        return self.glyphs[index]

    def __iter__(self) -> Iterator[GlyphBitmap]:
        return iter(self.glyphs)

    @property
    def chars(self) -> list[str]:
        return [g.char for g in self.glyphs]


def load_font(font_path: str | Path, font_size: int) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(str(font_path), font_size)
    except (OSError, ValueError) as e:
        raise FontLoadError(f"Cannot load font {font_path}: {e}") from e


def rasterize_glyph(char: str, font: ImageFont.FreeTypeFont) -> np.ndarray:
    """Render one character, white on black, into a bitmap sized to its layout box.

    The box spans the advance width and the full ascent + descent line height,
    widened if the ink overhangs either. The character is drawn at the origin
    with a left/ascender anchor so every glyph is top-aligned.
    """
    _, _, ink_right, ink_bottom = font.getbbox(char)
    ascent, descent = font.getmetrics()
    width = max(1, math.ceil(font.getlength(char)), ink_right)
    height = max(1, ascent + descent, ink_bottom)

    img = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(img)
    draw.text((0, 0), char, fill=255, font=font, anchor="la")
    return np.asarray(img, dtype=np.uint16) * _WIDEN


def build_atlas(
    characters: str,
    font: ImageFont.FreeTypeFont | str | Path,
    font_size: int | None = None,
) -> GlyphAtlas:
    """Rasterize every character of a repertoire plus its luminance-inverted twin.

    Args:
        characters: ordered repertoire; duplicates are rendered again
        font: a parsed FreeType font, or a path to one
        font_size: point size; required when ``font`` is a path

    Raises:
        EmptyRepertoireError: no characters given
        FontLoadError: the font cannot be loaded or fails to rasterize
    """
    if not characters:
        raise EmptyRepertoireError("No characters to render")

    if not isinstance(font, ImageFont.FreeTypeFont):
        if font_size is None:
            raise ValueError("font_size is required when loading a font from a path")
        font = load_font(font, font_size)
    elif font_size is not None and font_size != font.size:
        font = font.font_variant(size=font_size)

    try:
        bitmaps = [(char, rasterize_glyph(char, font)) for char in characters]
    except OSError as e:
        raise FontLoadError(f"Font failed to rasterize: {e}") from e

    atlas = GlyphAtlas.from_bitmaps(bitmaps)
    log.info(
        "Built atlas: %d glyphs (%d characters), cell %dx%d",
        len(atlas),
        len(characters),
        atlas.cell_width,
        atlas.cell_height,
    )
    return atlas
