"""`lagmap` - per-cell and per-bin summary statistics for lagged feature streams.

Subpackages:
- grid: Cell mapping, aggregation, standardization, event-rate heatmaps
- stats: Correlation/direction normalization, local probability curves
- features: Lag column schema and observation filters
- pipeline: Chunked processor and orchestrator
"""

__version__ = "0.1.0"
