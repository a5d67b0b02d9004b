class AsciifierError(Exception):
    """Base class for fatal rendering errors."""


class FontLoadError(AsciifierError):
    """The font resource could not be parsed."""


class EmptyRepertoireError(AsciifierError):
    """No characters were resolved for the chosen set."""


class ImageDecodeError(AsciifierError):
    """The source image could not be decoded."""


class OutOfBoundsContractViolation(AsciifierError, AssertionError):
    """Tile and glyph bounds disagree. Always a programming error."""
