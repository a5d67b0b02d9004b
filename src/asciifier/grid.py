from collections.abc import Iterator
from dataclasses import dataclass

from asciifier.errors import OutOfBoundsContractViolation


@dataclass(frozen=True)
class TileGrid:
    """Partition of a width x height image into cell-sized tiles.

    Right and bottom tiles are clipped to the image, so the grid covers every
    pixel exactly once.
    """

    width: int
    height: int
    cell_width: int
    cell_height: int

    def __post_init__(self):
        if self.cell_width < 1 or self.cell_height < 1:
            raise ValueError(f"Cell size must be positive, got {self.cell_width}x{self.cell_height}")
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")

    @property
    def columns(self) -> int:
        return -(-self.width // self.cell_width)

    @property
    def rows(self) -> int:
        return -(-self.height // self.cell_height)

    def origin(self, col: int, row: int) -> tuple[int, int]:
        return col * self.cell_width, row * self.cell_height

    def check(self, x0: int, y0: int) -> None:
        if not (0 <= x0 < self.width and 0 <= y0 < self.height):
            raise OutOfBoundsContractViolation(f"Tile origin ({x0}, {y0}) outside {self.width}x{self.height} image")

    def extent(self, x0: int, y0: int) -> tuple[int, int]:
        """Width and height of the tile at (x0, y0) after clipping to the image."""
        self.check(x0, y0)
        return min(self.cell_width, self.width - x0), min(self.cell_height, self.height - y0)

    def column(self, col: int) -> Iterator[tuple[int, int]]:
        """Tile origins down one column."""
        for row in range(self.rows):
            yield self.origin(col, row)

    def tiles(self) -> Iterator[tuple[int, int]]:
        """All tile origins, x outer and y inner."""
        for col in range(self.columns):
            yield from self.column(col)
