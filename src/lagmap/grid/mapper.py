"""Affine mapping from two continuous coordinates to grid cell indices.

Each observation (x0, x1) lands in cell

    row = floor(row_scale * x0 + row_offset)
    col = floor(col_scale * x1 + col_offset)

No clamping happens here: indices outside [0, nrow) x [0, ncol) are legal
output and are filtered (and counted as missed) by the consumers.
"""

import logging
from typing import TYPE_CHECKING, Tuple

import numpy as np

from lagmap.contracts import require_aligned

if TYPE_CHECKING:
    from lagmap.schemas import InternalConfig

__all__ = ['GridMapper', 'map_to_cells', 'OUT_OF_GRID']

logger = logging.getLogger(__name__)

# Index assigned to non-finite coordinates; never inside any grid.
OUT_OF_GRID = np.iinfo(np.int64).min


def _floor_index(values: np.ndarray) -> np.ndarray:
    """Floor to int64, sending NaN/Inf to OUT_OF_GRID."""
    floored = np.floor(values)
    finite = np.isfinite(floored)
    out = np.full(floored.shape, OUT_OF_GRID, dtype=np.int64)
    out[finite] = floored[finite].astype(np.int64)
    return out


def map_to_cells(x0, x1, row_scale: float, row_offset: float,
                 col_scale: float, col_offset: float) -> Tuple[np.ndarray, np.ndarray]:
    """Map coordinate pairs to (row, col) integer indices.

    Parameters
    ----------
    x0, x1 : array_like
        Coordinates of N observations, index aligned.
    row_scale, row_offset : float
        Affine parameters for the row axis (applied to x0).
    col_scale, col_offset : float
        Affine parameters for the column axis (applied to x1).

    Returns
    -------
    row, col : np.ndarray
        int64 arrays of length N. Non-finite coordinates map to
        ``OUT_OF_GRID`` so that they are always treated as missed.

    Raises
    ------
    PreconditionViolation
        If x0 and x1 differ in length.

    Examples
    --------
    >>> row, col = map_to_cells([0.0, 0.5], [1.0, -2.0], 70, 50, 15, 50)
    >>> row.tolist(), col.tolist()
    ([50, 85], [65, 20])
    """
    x0 = np.asarray(x0, dtype=np.float64)
    x1 = np.asarray(x1, dtype=np.float64)
    require_aligned(x0=x0, x1=x1)

    with np.errstate(invalid="ignore", over="ignore"):
        row = _floor_index(row_scale * x0 + row_offset)
        col = _floor_index(col_scale * x1 + col_offset)
    return row, col


class GridMapper:
    """Config-driven cell mapping for a fixed nrow x ncol grid.

    Besides the mapping itself, the mapper owns the grid geometry used by
    every consumer: the in-bounds test and the flattened cell index
    ``q = row * ncol + col``.
    """

    def __init__(self, config: "InternalConfig"):
        grid = config.grid
        self.nrow = grid.nrow
        self.ncol = grid.ncol
        self.row_scale = grid.row_scale
        self.row_offset = grid.row_offset
        self.col_scale = grid.col_scale
        self.col_offset = grid.col_offset

        logger.debug("GridMapper initialized: %dx%d, row=%s*x0+%s, col=%s*x1+%s",
                     self.nrow, self.ncol, self.row_scale, self.row_offset,
                     self.col_scale, self.col_offset)

    @property
    def n_cells(self) -> int:
        return self.nrow * self.ncol

    def map(self, x0, x1) -> Tuple[np.ndarray, np.ndarray]:
        """Map coordinates to (row, col); see map_to_cells."""
        return map_to_cells(x0, x1, self.row_scale, self.row_offset,
                            self.col_scale, self.col_offset)

    def in_bounds(self, row: np.ndarray, col: np.ndarray) -> np.ndarray:
        """Boolean mask of observations inside the grid."""
        return (row >= 0) & (row < self.nrow) & (col >= 0) & (col < self.ncol)

    def cell_index(self, row: np.ndarray, col: np.ndarray) -> np.ndarray:
        """Flattened cell index; only meaningful where in_bounds is True."""
        return row * self.ncol + col

    def cell_coords(self) -> Tuple[np.ndarray, np.ndarray]:
        """Coordinate value at the center of every row and column.

        Inverts the affine mapping, so renderers can label axes in the
        original coordinate units.
        """
        rows = (np.arange(self.nrow) + 0.5 - self.row_offset) / self.row_scale
        cols = (np.arange(self.ncol) + 0.5 - self.col_offset) / self.col_scale
        return rows, cols
