from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, ImageFont

from asciifier import compositor, matcher
from asciifier.charsets import DEFAULT_CHARSET, resolve_charset
from asciifier.glyph_atlas import GlyphAtlas, build_atlas
from asciifier.grid import TileGrid
from asciifier.source import SourceImage

log = logging.getLogger(__name__)


@dataclass
class RenderOptions:
    charset: str = DEFAULT_CHARSET
    font_size: int = 24
    colour: bool = False
    threshold: float | None = None
    workers: int | None = None


@dataclass
class Rendering:
    image: Image.Image
    selections: np.ndarray  # (rows, cols) atlas indices
    chars: list[str]  # one string per tile row


class Asciifier:
    """Renders images as a mosaic of glyphs from a prebuilt atlas."""

    def __init__(
        self,
        atlas: GlyphAtlas,
        colour: bool = False,
        threshold: float | None = None,
        workers: int | None = None,
    ):
        self.atlas = atlas
        self.colour = colour
        self.threshold = threshold
        self.workers = workers
        self.cell_width = atlas.cell_width
        self.cell_height = atlas.cell_height

    @classmethod
    def from_font(
        cls, font: ImageFont.FreeTypeFont | str | Path, options: RenderOptions | None = None
    ) -> Asciifier:
        options = options or RenderOptions()
        atlas = build_atlas(resolve_charset(options.charset), font, options.font_size)
        return cls(atlas, colour=options.colour, threshold=options.threshold, workers=options.workers)

    def render(self, image: Image.Image | SourceImage) -> Rendering:
        """Match every tile, then composite. Nothing is returned if any tile fails.

        A decoded image is split into views with this engine's threshold. A
        prepared SourceImage is used as-is; its luminance view already carries
        whatever threshold it was built with.
        """
        source = image if isinstance(image, SourceImage) else SourceImage.from_image(image, self.threshold)
        grid = TileGrid(source.width, source.height, self.cell_width, self.cell_height)
        log.info(
            "Rendering %dx%d image as %dx%d cells of %dx%d px",
            source.width,
            source.height,
            grid.columns,
            grid.rows,
            grid.cell_width,
            grid.cell_height,
        )
        selections = matcher.match_tiles(self.atlas, source.luminance, workers=self.workers)
        canvas = compositor.render(self.atlas, selections, source.colour, self.colour, workers=self.workers)

        char_arr = np.array(self.atlas.chars)
        chars = ["".join(char_arr[row]) for row in selections]
        return Rendering(image=canvas, selections=selections, chars=chars)
