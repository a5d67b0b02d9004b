from asciifier.errors import EmptyRepertoireError

ASCII_PRINTABLE = "".join(chr(i) for i in range(32, 127))

ASCII_SYMBOLS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~ "

# Block elements: U+2580-U+259F (fills, eighths, halves, quadrants, shades)
BLOCKS = "".join(chr(i) for i in range(0x2580, 0x25A0)) + " "

# Braille patterns: U+2800 to U+28FF (256 characters, 2x4 dot grid)
BRAILLE = "".join(chr(i) for i in range(0x2800, 0x2900))

# Box drawing, shades and small geometric shapes
SYMBOLS = " ─│┌┐└┘├┤┬┴┼╱╲╳░▒▓■□▪▫●○◘◙•◦"

CHARSETS = {
    "ascii-printable": ASCII_PRINTABLE,
    "block-elements": BLOCKS,
    "ascii+blocks": ASCII_SYMBOLS + BLOCKS,
    "symbols": SYMBOLS,
    "braille": BRAILLE,
}

DEFAULT_CHARSET = "ascii+blocks"


def resolve_charset(name: str) -> str:
    """Look up a named repertoire. Order is preserved, duplicates are kept."""
    try:
        characters = CHARSETS[name]
    except KeyError:
        raise ValueError(f"Unknown character set: {name!r} (choose from {', '.join(sorted(CHARSETS))})") from None
    if not characters:
        raise EmptyRepertoireError(f"Character set {name!r} is empty")
    return characters
