import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from asciifier.errors import ImageDecodeError
from asciifier.glyph_atlas import MAX_LUMINANCE

log = logging.getLogger(__name__)

# The original pipeline binarises the greyscale view at 10% luminance
DEFAULT_THRESHOLD = 0.1


@dataclass(frozen=True, eq=False)
class SourceImage:
    colour: np.ndarray  # (h, w, 3) uint8
    luminance: np.ndarray  # (h, w) uint16, 0..MAX_LUMINANCE

    def __post_init__(self):
        if self.colour.shape[:2] != self.luminance.shape:
            raise ValueError(f"Colour view {self.colour.shape[:2]} and luminance view {self.luminance.shape} differ")
        self.colour.flags.writeable = False
        self.luminance.flags.writeable = False

    @property
    def width(self) -> int:
        return self.luminance.shape[1]

    @property
    def height(self) -> int:
        return self.luminance.shape[0]

    @classmethod
    def from_image(cls, image: Image.Image, threshold: float | None = None) -> "SourceImage":
        """Split a decoded image into RGB and 16-bit luminance views.

        With a threshold, luminance at or above ``threshold * MAX_LUMINANCE``
        becomes full white and everything else black.
        """
        rgb = image.convert("RGB")
        colour = np.array(rgb, dtype=np.uint8)
        luminance = np.array(rgb.convert("L"), dtype=np.uint16) * (MAX_LUMINANCE // 255)
        if threshold is not None:
            luminance = np.where(luminance >= threshold * MAX_LUMINANCE, MAX_LUMINANCE, 0).astype(np.uint16)
        return cls(colour=colour, luminance=luminance)


def load_image(path: str | Path) -> Image.Image:
    path = Path(path)
    try:
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Cannot decode {path}: {e}") from e


def save_image(image: Image.Image, path: str | Path) -> None:
    path = Path(path)
    image.save(path)
    log.info("Saved: %s (%dx%d)", path, image.width, image.height)
