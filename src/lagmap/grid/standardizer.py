"""Count-weighted standardization of per-cell mean vectors.

Centers every populated cell's mean vector on the count-weighted global
mean and scales each feature by the count-weighted standard deviation of
the centered means. Zero-count cells are left out of both reductions and
are not centered, but the scaling is applied to every cell.

A zero (or NaN) scale yields NaN/Inf in the output. That is a degenerate
input signal for the caller and is deliberately not guarded here.
"""

import logging
from dataclasses import dataclass

import numpy as np

from lagmap.contracts import PreconditionViolation, require

__all__ = ['StandardizationResult', 'standardize_cell_means']

logger = logging.getLogger(__name__)


@dataclass
class StandardizationResult:
    """Standardized means plus the center and scale that produced them."""
    means: np.ndarray
    center: np.ndarray
    scale: np.ndarray


def standardize_cell_means(cell_means: np.ndarray, cell_counts: np.ndarray) -> StandardizationResult:
    """Standardize cell means IN PLACE.

    Mutates ``cell_means``: the standardized values replace the raw means.
    The same array is returned as ``result.means``.

    Parameters
    ----------
    cell_means : np.ndarray
        (n_cells, K) float array of per-cell means, NaN for empty cells.
        Modified in place.
    cell_counts : np.ndarray
        (n_cells,) observation counts.

    Returns
    -------
    StandardizationResult
        ``means`` (the mutated input), ``center`` (weighted mean vector,
        length K) and ``scale`` (weighted standard deviation, length K).

    Raises
    ------
    PreconditionViolation
        If the arrays do not describe the same cells or cell_means is not
        a float matrix.

    Notes
    -----
    After the call, over populated cells q with weights counts[q]:
    the weighted mean of each feature is 0 and the weighted variance is 1.
    """
    require(
        isinstance(cell_means, np.ndarray) and cell_means.ndim == 2 and cell_means.dtype.kind == "f",
        "cell_means must be a 2-D float ndarray (it is standardized in place)",
        PreconditionViolation,
    )
    counts = np.asarray(cell_counts)
    require(
        counts.shape == (cell_means.shape[0],),
        f"cell_counts shape {counts.shape} does not match {cell_means.shape[0]} cells",
        PreconditionViolation,
    )

    populated = counts > 0
    weights = counts[populated].astype(np.float64)
    total = weights.sum()

    with np.errstate(divide="ignore", invalid="ignore"):
        # Center
        center = weights @ cell_means[populated] / total
        cell_means[populated] -= center

        # Scale
        variance = weights @ (cell_means[populated] ** 2) / total
        scale = np.sqrt(variance)
        cell_means /= scale

    n_degenerate = int(np.sum(~(scale > 0)))
    if n_degenerate:
        logger.warning("Standardization: %d of %d features have zero or undefined scale",
                       n_degenerate, len(scale))
    logger.debug("Standardized %d populated cells (total weight %d)", int(populated.sum()), int(total))

    return StandardizationResult(means=cell_means, center=center, scale=scale)
