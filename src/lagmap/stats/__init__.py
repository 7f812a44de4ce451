"""Statistics independent of the grid.

- correlation: Covariance to correlation, unit-variance direction scaling
- local_probability: Sliding-window event probability over sorted scores
- directions: Expanding, projecting and scaling fitted directions
"""

from lagmap.stats.correlation import to_correlation, quadratic_form, normalize_direction
from lagmap.stats.local_probability import local_probability, LocalProbabilityEstimator
from lagmap.stats.directions import expand_directions, project, covariance_difference, unit_norm

__all__ = [
    "to_correlation",
    "quadratic_form",
    "normalize_direction",
    "local_probability",
    "LocalProbabilityEstimator",
    "expand_directions",
    "project",
    "covariance_difference",
    "unit_norm",
]
