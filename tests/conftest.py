import os
import shutil
import subprocess

import numpy as np
import pytest
from PIL import ImageFont

from asciifier.glyph_atlas import MAX_LUMINANCE, GlyphAtlas

_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu-sans-mono-fonts/DejaVuSansMono.ttf",
]


def _find_monospace_font():
    """Find a monospace font on the system."""
    for path in _FONT_CANDIDATES:
        if os.path.exists(path):
            return path
    result = shutil.which("fc-match")
    if result:
        out = subprocess.run(["fc-match", "-f", "%{file}", "monospace"], capture_output=True, text=True)
        if out.returncode == 0 and out.stdout.strip():
            return out.stdout.strip()
    return None


FONT_PATH = _find_monospace_font()
needs_font = pytest.mark.skipif(FONT_PATH is None, reason="No monospace font found on system")


@pytest.fixture
def default_font():
    """Pillow's bundled FreeType font, so rasterization tests don't need system fonts."""
    font = ImageFont.load_default(size=16)
    if not isinstance(font, ImageFont.FreeTypeFont):
        pytest.skip("Pillow built without FreeType")
    return font


def make_atlas(*glyphs, width=2, height=3):
    """Atlas from (char, fill) pairs of flat bitmaps, plus their inverted variants.

    ``fill`` may also be a full (height, width) array.
    """
    bitmaps = []
    for char, fill in glyphs:
        if np.isscalar(fill):
            fill = np.full((height, width), fill, dtype=np.uint16)
        bitmaps.append((char, fill))
    return GlyphAtlas.from_bitmaps(bitmaps)


@pytest.fixture
def dark_light_atlas():
    """' ' is black, '#' is white; the inverted pair reverses them."""
    return make_atlas((" ", 0), ("#", MAX_LUMINANCE))
