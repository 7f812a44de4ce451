"""Grid analysis processor.

Runs observation chunks through filtering, cell mapping, cell aggregation,
standardization, the event-rate heatmap and the local probability curves.
Column names are resolved to positions once, when the processor is built;
after that every chunk must carry exactly the same columns.
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import TYPE_CHECKING, Dict, Iterable, List, Sequence, Union

import numpy as np
import pandas as pd
import xarray as xr

from lagmap.contracts import (
    PreconditionViolation,
    require,
    assert_cell_indices,
    assert_cell_statistics,
    assert_rate_surface,
    assert_probability_curve,
)
from lagmap.features import LagSchema, select_eq, select_at_least, event_continuations, combine_masks
from lagmap.grid import (
    GridMapper,
    CellAggregator,
    CellStatistics,
    HeatmapEstimator,
    HeatmapCounts,
    HeatmapResult,
    StandardizationResult,
    standardize_cell_means,
)
from lagmap.stats import LocalProbabilityEstimator

if TYPE_CHECKING:
    from lagmap.schemas import InternalConfig

__all__ = ['GridAnalysisProcessor', 'AnalysisResult', 'ProbabilityCurve']

logger = logging.getLogger(__name__)


@dataclass
class ProbabilityCurve:
    """Sorted scores and their local event probabilities."""
    name: str
    scores: np.ndarray
    probs: np.ndarray


@dataclass
class AnalysisResult:
    """Everything one analysis run produces.

    ``standardized.means`` holds the standardized cell means; raw means can
    be recomputed from ``cell_stats.means()``.
    """
    feature_names: List[str]
    cell_stats: CellStatistics
    standardized: StandardizationResult
    heatmap: HeatmapResult
    curves: Dict[str, ProbabilityCurve] = field(default_factory=dict)
    n_obs: int = 0
    n_kept: int = 0

    def to_dataset(self) -> xr.Dataset:
        """Plot-ready dataset for the rendering side.

        Grid variables use (row, col) dims, cell means add a ``feature``
        dim, and probability curves share a ``rank`` dim.
        """
        nrow, ncol = self.heatmap.nrow, self.heatmap.ncol
        grid_coords = {"row": np.arange(nrow), "col": np.arange(ncol)}

        data_vars = {
            "event_rate": self.heatmap.to_dataarray(),
            "cell_count": (("row", "col"), self.cell_stats.counts.reshape(nrow, ncol)),
            "standardized_mean": (
                ("row", "col", "feature"),
                self.standardized.means.reshape(nrow, ncol, -1),
            ),
            "center": (("feature",), self.standardized.center),
            "scale": (("feature",), self.standardized.scale),
        }
        for name, curve in self.curves.items():
            data_vars[f"{name}_score"] = (("rank",), curve.scores)
            data_vars[f"{name}_probability"] = (("rank",), curve.probs)

        coords = dict(grid_coords, feature=self.feature_names)
        if self.curves:
            n_rank = len(next(iter(self.curves.values())).scores)
            coords["rank"] = np.arange(n_rank)

        return xr.Dataset(
            data_vars,
            coords=coords,
            attrs={
                "n_obs": self.n_obs,
                "n_kept": self.n_kept,
                "hit": self.heatmap.hit,
                "missed": self.heatmap.missed,
            },
        )

    def curves_frame(self) -> pd.DataFrame:
        """Probability curves in long format: one row per (score variable, point)."""
        frames = [
            pd.DataFrame({"variable": name, "score": curve.scores, "probability": curve.probs})
            for name, curve in self.curves.items()
        ]
        if not frames:
            return pd.DataFrame(columns=["variable", "score", "probability"])
        return pd.concat(frames, ignore_index=True)


class GridAnalysisProcessor:
    """Process chunks of observations into grid and curve statistics.

    **Processing Pipeline:**

    For each chunk (in order):

    1. **Filter**: drop rows failing the configured filters (minimum speed,
       required equalities, event continuations within a segment).
    2. **Map**: coordinates to (row, col) cells.

    Then, over all chunks:

    3. **Aggregate**: per-cell lag-feature sums and counts, fanned out over
       ``aggregation.n_workers`` threads and merged once.
    4. **Standardize**: count-weighted centering/scaling of cell means.
    5. **Heatmap**: per-cell event-rate surface with sentinel for sparse cells.
    6. **Local probability**: one curve per configured score over all kept rows.

    Example usage::

        processor = GridAnalysisProcessor(config, frame.columns)
        result = processor.process([chunk_a, chunk_b])
        ds = result.to_dataset()
    """

    def __init__(self, config: "InternalConfig", columns: Sequence[str]):
        """Resolve every configured column to its position.

        Raises
        ------
        PreconditionViolation
            If a configured column is missing from ``columns``.
        """
        self.config = config
        self.columns = list(columns)
        self._position = {name: k for k, name in enumerate(self.columns)}

        self.schema = LagSchema.from_config(config).resolve(self.columns)

        variables = config.variables
        self.x0_idx = self._resolve(variables.coord_x0)
        self.x1_idx = self._resolve(variables.coord_x1)
        self.outcome_idx = self._resolve(variables.outcome)
        self.score_idx = {name: self._resolve(name) for name in variables.scores}

        filters = config.filters
        self.filters_enabled = filters.enabled
        self.min_speed = filters.min_speed
        self.speed_idx = None
        self.equal_idx = {}
        self.event_idx = None
        self.segment_idx = None
        if filters.enabled:
            if filters.speed_column is not None:
                self.speed_idx = self._resolve(filters.speed_column)
            self.equal_idx = {self._resolve(name): target
                              for name, target in filters.require_equal.items()}
            if filters.drop_event_continuations:
                self.event_idx = self._resolve(filters.event_column)
                if filters.segment_column is not None:
                    self.segment_idx = self._resolve(filters.segment_column)

        self.mapper = GridMapper(config)
        self.aggregator = CellAggregator(config)
        self.heatmap = HeatmapEstimator(config)
        self.local_probability = LocalProbabilityEstimator(config)

        logger.info("GridAnalysisProcessor initialized: %d columns, %d lag features, grid %dx%d",
                    len(self.columns), self.schema.n_features, self.mapper.nrow, self.mapper.ncol)

    def _resolve(self, name: str) -> int:
        require(name in self._position, f"Column '{name}' not found in data columns",
                PreconditionViolation)
        return self._position[name]

    def _as_matrix(self, chunk: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """Float matrix of a chunk, after checking its column layout."""
        if isinstance(chunk, pd.DataFrame):
            require(
                list(chunk.columns) == self.columns,
                f"Chunk columns {list(chunk.columns)} differ from resolved columns",
                PreconditionViolation,
            )
            return chunk.to_numpy(dtype=np.float64)
        matrix = np.asarray(chunk, dtype=np.float64)
        require(
            matrix.ndim == 2 and matrix.shape[1] == len(self.columns),
            f"Chunk shape {matrix.shape} does not match {len(self.columns)} columns",
            PreconditionViolation,
        )
        return matrix

    def keep_mask(self, matrix: np.ndarray) -> np.ndarray:
        """Rows of a chunk that pass the configured filters."""
        masks = [np.ones(len(matrix), dtype=bool)]
        if not self.filters_enabled:
            return masks[0]

        if self.speed_idx is not None:
            masks.append(select_at_least(matrix[:, self.speed_idx], self.min_speed))
        for idx, target in self.equal_idx.items():
            masks.append(select_eq(matrix[:, idx], target))
        if self.event_idx is not None:
            segments = matrix[:, self.segment_idx] if self.segment_idx is not None else None
            masks.append(~event_continuations(matrix[:, self.event_idx], segments))
        return combine_masks(*masks)

    def process(self, chunks: Union[pd.DataFrame, Iterable[pd.DataFrame]]) -> AnalysisResult:
        """Run the full analysis over one DataFrame or an iterable of chunks.

        Returns
        -------
        AnalysisResult

        Raises
        ------
        PreconditionViolation
            On a malformed chunk, or when too few rows survive filtering
            for the configured probability window.
        ContractViolation
            If a stage breaks its output invariants.
        """
        if isinstance(chunks, (pd.DataFrame, np.ndarray)):
            chunks = [chunks]

        prepared = []
        heat_counts = []
        scores = {name: [] for name in self.score_idx}
        outcomes = []
        n_obs = 0

        for chunk in chunks:
            matrix = self._as_matrix(chunk)
            n_obs += len(matrix)
            kept = matrix[self.keep_mask(matrix)]

            row, col = self.mapper.map(kept[:, self.x0_idx], kept[:, self.x1_idx])
            assert_cell_indices(row, col, len(kept))

            outcome = kept[:, self.outcome_idx]
            prepared.append((row, col, self.schema.take(kept)))
            heat_counts.append(self.heatmap.count(row, col, outcome))
            outcomes.append(outcome)
            for name, idx in self.score_idx.items():
                scores[name].append(kept[:, idx])

        require(len(prepared) > 0, "No chunks to process", PreconditionViolation)
        n_kept = sum(len(p[0]) for p in prepared)
        logger.info("Observations: %d read, %d kept after filtering", n_obs, n_kept)

        cell_stats = self.aggregator.aggregate_chunks(
            prepared, count_feature=self.schema.count_feature
        )
        assert_cell_statistics(cell_stats.sums, cell_stats.counts, self.mapper.n_cells)

        standardized = standardize_cell_means(cell_stats.means(), cell_stats.counts)

        heatmap = self.heatmap.rates(reduce(HeatmapCounts.merge, heat_counts))
        assert_rate_surface(heatmap.rate, heatmap.denom, self.mapper.n_cells,
                            heatmap.sentinel, heatmap.hit, heatmap.missed, n_kept)
        require(
            heatmap.hit == cell_stats.hit,
            f"Heatmap hit={heatmap.hit} disagrees with aggregation hit={cell_stats.hit}"
        )
        logger.info("Missed %d", heatmap.missed)
        logger.info("Hit %d", heatmap.hit)

        curves = {}
        if self.score_idx:
            outcome = np.concatenate(outcomes)
            for name in self.score_idx:
                sc, probs = self.local_probability.estimate(np.concatenate(scores[name]), outcome)
                assert_probability_curve(sc, probs, n_kept, self.local_probability.half_window)
                curves[name] = ProbabilityCurve(name=name, scores=sc, probs=probs)

        return AnalysisResult(
            feature_names=self.schema.names,
            cell_stats=cell_stats,
            standardized=standardized,
            heatmap=heatmap,
            curves=curves,
            n_obs=n_obs,
            n_kept=n_kept,
        )
