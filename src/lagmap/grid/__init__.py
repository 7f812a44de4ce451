"""Grid-cell statistics.

- mapper: Coordinates to (row, col) cell indices
- aggregator: Per-cell feature sums, counts and means
- standardizer: Count-weighted centering and scaling of cell means
- heatmap: Per-cell smoothed event-rate surface
"""

from lagmap.grid.mapper import GridMapper, map_to_cells
from lagmap.grid.aggregator import CellAggregator, CellStatistics
from lagmap.grid.standardizer import standardize_cell_means, StandardizationResult
from lagmap.grid.heatmap import HeatmapEstimator, HeatmapCounts, HeatmapResult

__all__ = [
    "GridMapper",
    "map_to_cells",
    "CellAggregator",
    "CellStatistics",
    "standardize_cell_means",
    "StandardizationResult",
    "HeatmapEstimator",
    "HeatmapCounts",
    "HeatmapResult",
]
