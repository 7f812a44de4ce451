"""Smoothed per-cell event-rate surface.

For every in-bounds observation the cell denominator is incremented, and the
numerator too when the outcome equals 1. Cells with more than ``min_count``
observations get ``(num / denom) ** power``; all others get the sentinel.
The power (0.1 by default) compresses the dynamic range of small
probabilities for display.

Counting and rate computation are separate steps so that counts from
independent chunks can be merged before rates are taken.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import xarray as xr

from lagmap.contracts import PreconditionViolation, require, require_aligned
from lagmap.grid.mapper import GridMapper

if TYPE_CHECKING:
    from lagmap.schemas import InternalConfig

__all__ = ['HeatmapCounts', 'HeatmapResult', 'HeatmapEstimator']

logger = logging.getLogger(__name__)


@dataclass
class HeatmapCounts:
    """Per-cell event numerators/denominators and hit/missed diagnostics."""
    num: np.ndarray
    denom: np.ndarray
    hit: int = 0
    missed: int = 0

    def merge(self, other: "HeatmapCounts") -> "HeatmapCounts":
        """Combine two partial counts by elementwise addition."""
        require(
            self.denom.shape == other.denom.shape,
            f"Cannot merge heatmap counts of shapes {self.denom.shape} and {other.denom.shape}",
            PreconditionViolation,
        )
        return HeatmapCounts(
            num=self.num + other.num,
            denom=self.denom + other.denom,
            hit=self.hit + other.hit,
            missed=self.missed + other.missed,
        )


@dataclass
class HeatmapResult:
    """Rate surface, cell counts and diagnostics.

    ``hit`` and ``missed`` are returned for the caller to log; the
    estimator itself only logs them at DEBUG level.
    """
    rate: np.ndarray
    denom: np.ndarray
    hit: int
    missed: int
    nrow: int
    ncol: int
    sentinel: float

    def insufficient(self) -> np.ndarray:
        """Boolean mask of cells carrying the sentinel."""
        return self.rate == self.sentinel

    def to_dataarray(self, name: str = "event_rate") -> xr.DataArray:
        """Rate surface as a (row, col) DataArray for rendering.

        Sentinel cells are kept as-is; ``attrs['sentinel']`` names the value.
        """
        return xr.DataArray(
            self.rate.reshape(self.nrow, self.ncol),
            dims=("row", "col"),
            coords={"row": np.arange(self.nrow), "col": np.arange(self.ncol)},
            name=name,
            attrs={
                "long_name": "Stabilized cell event rate",
                "sentinel": self.sentinel,
                "hit": self.hit,
                "missed": self.missed,
            },
        )


class HeatmapEstimator:
    """Config-driven event-rate surface over the analysis grid."""

    def __init__(self, config: "InternalConfig"):
        self.mapper = GridMapper(config)
        self.min_count = config.heatmap.min_count
        self.power = config.heatmap.power
        self.sentinel = config.heatmap.sentinel

        logger.debug("HeatmapEstimator initialized: min_count=%d, power=%s, sentinel=%s",
                     self.min_count, self.power, self.sentinel)

    def count(self, row, col, y) -> HeatmapCounts:
        """Count observations and events per cell.

        Parameters
        ----------
        row, col : array_like
            Integer cell indices, possibly out of range.
        y : array_like
            Binary outcome; only values exactly equal to 1 count as events.

        Raises
        ------
        PreconditionViolation
            If row, col and y differ in length.
        """
        row = np.asarray(row, dtype=np.int64)
        col = np.asarray(col, dtype=np.int64)
        y = np.asarray(y)
        require_aligned(row=row, col=col, y=y)

        n_cells = self.mapper.n_cells
        inside = self.mapper.in_bounds(row, col)
        q = self.mapper.cell_index(row[inside], col[inside])

        denom = np.bincount(q, minlength=n_cells).astype(np.int64)
        num = np.bincount(q[y[inside] == 1], minlength=n_cells).astype(np.float64)

        hit = int(inside.sum())
        return HeatmapCounts(num=num, denom=denom, hit=hit, missed=len(row) - hit)

    def rates(self, counts: HeatmapCounts) -> HeatmapResult:
        """Turn counts into the stabilized rate surface.

        Cells with ``denom > min_count`` (strictly) get
        ``(num / denom) ** power``, all others the sentinel.
        """
        enough = counts.denom > self.min_count
        rate = np.full(counts.denom.shape, self.sentinel, dtype=np.float64)
        rate[enough] = (counts.num[enough] / counts.denom[enough]) ** self.power

        logger.debug("Heatmap: %d of %d cells above min_count=%d (hit=%d, missed=%d)",
                     int(enough.sum()), len(rate), self.min_count, counts.hit, counts.missed)

        return HeatmapResult(
            rate=rate,
            denom=counts.denom,
            hit=counts.hit,
            missed=counts.missed,
            nrow=self.mapper.nrow,
            ncol=self.mapper.ncol,
            sentinel=self.sentinel,
        )

    def estimate(self, row, col, y) -> HeatmapResult:
        """Count and compute rates in one step."""
        return self.rates(self.count(row, col, y))
