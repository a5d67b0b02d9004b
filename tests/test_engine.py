import numpy as np
from PIL import Image

from asciifier.charsets import BLOCKS
from asciifier.engine import Asciifier, RenderOptions
from asciifier.glyph_atlas import MAX_LUMINANCE
from asciifier.source import SourceImage
from tests.conftest import make_atlas


def _gradient(width=40, height=30):
    x = np.linspace(0, 255, width, dtype=np.float64)
    y = np.linspace(0, 255, height, dtype=np.float64)[:, None]
    arr = np.stack([np.broadcast_to(x, (height, width)), np.broadcast_to(y, (height, width)), (x + y) / 2], axis=2)
    return Image.fromarray(arr.astype(np.uint8))


def _striped_atlas():
    half = np.zeros((3, 2), dtype=np.uint16)
    half[:, 1] = MAX_LUMINANCE
    return make_atlas((" ", 0), ("|", half), ("#", MAX_LUMINANCE))


def test_colour_does_not_change_selection():
    image = _gradient()
    plain = Asciifier(_striped_atlas()).render(image)
    tinted = Asciifier(_striped_atlas(), colour=True).render(image)
    np.testing.assert_array_equal(plain.selections, tinted.selections)
    assert plain.chars == tinted.chars


def test_render_is_deterministic():
    image = _gradient()
    engine = Asciifier(_striped_atlas(), colour=True, workers=4)
    first = engine.render(image).image.tobytes()
    for _ in range(3):
        assert engine.render(image).image.tobytes() == first
    assert Asciifier(_striped_atlas(), colour=True, workers=1).render(image).image.tobytes() == first


def test_output_matches_source_size():
    image = Image.new("RGB", (13, 11), (50, 100, 150))
    result = Asciifier(_striped_atlas()).render(image)
    assert result.image.size == (13, 11)
    assert result.selections.shape == (4, 7)


def test_chars_follow_selections():
    image = Image.new("L", (4, 3))
    image.paste(255, (2, 0, 4, 3))
    result = Asciifier(_striped_atlas()).render(image)
    assert result.chars == [" #"]


def test_accepts_prepared_source():
    source = SourceImage.from_image(Image.new("RGB", (4, 3), (255, 255, 255)))
    result = Asciifier(_striped_atlas()).render(source)
    assert result.chars == ["##"]


def test_threshold_applied_before_matching():
    # Dim grey is below 10% luminance, so it binarises to black
    image = Image.new("L", (2, 3), 20)
    assert Asciifier(_striped_atlas(), threshold=0.1).render(image).chars == [" "]
    assert Asciifier(_striped_atlas(), threshold=0.01).render(image).chars == ["#"]


def test_from_font(default_font):
    engine = Asciifier.from_font(default_font, RenderOptions(charset="block-elements", font_size=12, colour=True))
    assert engine.colour
    assert len(engine.atlas) == 2 * len(BLOCKS)
    image = Image.new("RGB", (engine.cell_width * 3 + 1, engine.cell_height * 2), (200, 40, 40))
    result = engine.render(image)
    assert result.image.size == image.size
    assert len(result.chars) == 2
    assert all(len(row) == 4 for row in result.chars)


def test_prepared_source_keeps_its_own_luminance():
    # Built without a threshold, the dim grey stays grey; the engine threshold is not reapplied
    source = SourceImage.from_image(Image.new("L", (2, 3), 20))
    atlas = make_atlas((" ", 0), ("g", 20 * 257), ("#", MAX_LUMINANCE))
    assert Asciifier(atlas, threshold=0.5).render(source).chars == ["g"]
    assert Asciifier(atlas, threshold=0.5).render(Image.new("L", (2, 3), 20)).chars == [" "]
