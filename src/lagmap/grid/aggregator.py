"""Per-cell accumulation of lagged feature streams.

Every in-bounds observation adds its K feature values to the sum vector of
its cell and increments the cell's observation counter once. Cell means are
sums divided by counts; cells that received no observation have NaN means,
so callers must check ``counts[q] > 0`` before using ``means[q]``.

Aggregation is a pure reduction: statistics from independent chunks merge
by elementwise addition, which lets ``aggregate_chunks`` fan chunks out to
worker threads that each own a private accumulator.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from lagmap.contracts import PreconditionViolation, require, require_aligned
from lagmap.grid.mapper import GridMapper

if TYPE_CHECKING:
    from lagmap.schemas import InternalConfig

__all__ = ['CellStatistics', 'CellAggregator', 'stack_features']

logger = logging.getLogger(__name__)

FeatureInput = Union[np.ndarray, Sequence[np.ndarray]]


def stack_features(features: FeatureInput) -> np.ndarray:
    """Return features as a float (N, K) matrix.

    Accepts either an (N, K) array or a sequence of K length-N arrays.
    """
    if isinstance(features, np.ndarray) and features.ndim == 2:
        return features.astype(np.float64, copy=False)
    columns = [np.asarray(f, dtype=np.float64) for f in features]
    require(len(columns) > 0, "At least one feature stream is required", PreconditionViolation)
    require_aligned(**{f"feature_{k}": c for k, c in enumerate(columns)})
    return np.column_stack(columns)


@dataclass
class CellStatistics:
    """Per-cell running sums and observation counts.

    Attributes
    ----------
    sums : np.ndarray
        (n_cells, K) float sums; row q belongs to cell q = row * ncol + col.
    counts : np.ndarray
        (n_cells,) int64 observation counts.
    hit : int
        In-bounds observations accumulated.
    missed : int
        Out-of-bounds observations skipped.
    """
    sums: np.ndarray
    counts: np.ndarray
    hit: int = 0
    missed: int = 0

    @classmethod
    def empty(cls, n_cells: int, n_features: int) -> "CellStatistics":
        return cls(np.zeros((n_cells, n_features)), np.zeros(n_cells, dtype=np.int64))

    @property
    def n_cells(self) -> int:
        return self.sums.shape[0]

    @property
    def n_features(self) -> int:
        return self.sums.shape[1]

    def merge(self, other: "CellStatistics") -> "CellStatistics":
        """Combine two partial accumulators by elementwise addition."""
        require(
            self.sums.shape == other.sums.shape,
            f"Cannot merge cell statistics of shapes {self.sums.shape} and {other.sums.shape}",
            PreconditionViolation,
        )
        return CellStatistics(
            sums=self.sums + other.sums,
            counts=self.counts + other.counts,
            hit=self.hit + other.hit,
            missed=self.missed + other.missed,
        )

    def means(self) -> np.ndarray:
        """Per-cell mean vectors, NaN for cells with zero count."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return self.sums / self.counts[:, np.newaxis]

    def populated(self) -> np.ndarray:
        """Boolean mask of cells with at least one observation."""
        return self.counts > 0


class CellAggregator:
    """Accumulate per-cell sums and counts over K parallel feature streams.

    The stream that defines observation counts is passed explicitly as
    ``count_feature`` (its column index). Counts record presence, not
    value: every in-bounds row increments its cell counter once, whichever
    stream is named, and the index only records which stream defines
    presence. All streams add to sums.

    Examples
    --------
    >>> agg = CellAggregator(config)
    >>> stats = agg.aggregate(row, col, lag_matrix, count_feature=0)
    >>> means = stats.means()
    >>> valid = stats.populated()
    """

    def __init__(self, config: "InternalConfig"):
        self.mapper = GridMapper(config)
        self.n_workers = config.aggregation.n_workers

    @property
    def n_cells(self) -> int:
        return self.mapper.n_cells

    def aggregate(self, row, col, features: FeatureInput, *, count_feature: int) -> CellStatistics:
        """Accumulate one batch of observations.

        Parameters
        ----------
        row, col : array_like
            Integer cell indices from GridMapper (may be out of range).
        features : np.ndarray or sequence of arrays
            (N, K) matrix or K length-N streams, index aligned with row/col.
        count_feature : int
            Column of the stream that defines presence, keyword-only. It
            is range-checked; its values do not change the counts.

        Returns
        -------
        CellStatistics
            Fresh accumulators owned by the caller.

        Raises
        ------
        PreconditionViolation
            On misaligned inputs or an invalid count_feature.
        """
        row = np.asarray(row, dtype=np.int64)
        col = np.asarray(col, dtype=np.int64)
        matrix = stack_features(features)
        require_aligned(row=row, col=col, features=matrix)
        n_features = matrix.shape[1]
        require(
            0 <= count_feature < n_features,
            f"count_feature must be in [0, {n_features}), got {count_feature}",
            PreconditionViolation,
        )

        inside = self.mapper.in_bounds(row, col)
        q = self.mapper.cell_index(row[inside], col[inside])
        values = matrix[inside]

        sums = np.empty((self.n_cells, n_features))
        for k in range(n_features):
            sums[:, k] = np.bincount(q, weights=values[:, k], minlength=self.n_cells)

        # one increment per in-bounds observation of the count-defining stream
        counts = np.bincount(q, minlength=self.n_cells).astype(np.int64)

        hit = int(inside.sum())
        return CellStatistics(sums=sums, counts=counts, hit=hit, missed=len(row) - hit)

    def aggregate_chunks(self, chunks: Iterable[Tuple[np.ndarray, np.ndarray, FeatureInput]],
                         *, count_feature: int, n_workers: Optional[int] = None) -> CellStatistics:
        """Aggregate independent chunks and merge the partial results.

        Each chunk is a ``(row, col, features)`` tuple. With more than one
        worker, chunks are processed concurrently; every worker returns a
        private CellStatistics and the partials are summed once at the end.
        The result does not depend on chunk order beyond floating point
        summation order.
        """
        n_workers = n_workers or self.n_workers

        def _one(chunk):
            row, col, features = chunk
            return self.aggregate(row, col, features, count_feature=count_feature)

        if n_workers > 1:
            with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="CellAggregator") as pool:
                partials = list(pool.map(_one, chunks))
        else:
            partials = [_one(chunk) for chunk in chunks]

        require(len(partials) > 0, "aggregate_chunks needs at least one chunk", PreconditionViolation)
        logger.debug("Merging %d partial cell accumulators (workers=%d)", len(partials), n_workers)
        return reduce(CellStatistics.merge, partials)
