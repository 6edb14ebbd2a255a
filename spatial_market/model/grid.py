"""Grid geometry for the spatial market simulation."""

import numpy as np
from typing import Iterable, Set, Tuple


class MarketGrid:
    """
    Discrete customer grid of ``width x height`` cells.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Every cell holds exactly one customer.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid must be positive-sized, got {width}x{height}")
        self.width = width
        self.height = height

        # Customer coordinates in row-major order, shape (height * width, 2)
        ys, xs = np.mgrid[0:height, 0:width]
        self.cells = np.column_stack([xs.ravel(), ys.ravel()]).astype(np.float64)

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if cell lies within the grid."""
        return 0 <= x < self.width and 0 <= y < self.height

    def random_cell(self, rng: np.random.Generator) -> Tuple[int, int]:
        """Uniformly sample a cell."""
        x = int(rng.integers(0, self.width))
        y = int(rng.integers(0, self.height))
        return x, y

    def reshape(self, values: np.ndarray) -> np.ndarray:
        """Turn a per-cell vector (row-major) into a [y, x] array."""
        return np.asarray(values).reshape(self.height, self.width)

    @staticmethod
    def occupied_cells(positions: Iterable[Tuple[int, int]]) -> Set[Tuple[int, int]]:
        """Return set of occupied cell positions."""
        return {(int(x), int(y)) for x, y in positions}
