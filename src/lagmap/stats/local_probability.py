"""Local conditional probability curve over a sorted continuous score.

Observations are stably sorted by score. For every sorted position i in
[w, N - w) whose outcome equals 1, each position j in the half-open window
[i - w, i + w) receives one count. Counts are divided by 2w and both the
sorted scores and the probabilities are trimmed by w on each end.

This is a box-kernel smoother over 2w sorted neighbours. Positions within
w of the trimmed edges see only part of the event window, so there the
estimate is biased low; positions in [2w - 1, N - 2w) are fully covered.
"""

import logging
from typing import TYPE_CHECKING, Tuple

import numpy as np

from lagmap.contracts import PreconditionViolation, require, require_aligned

if TYPE_CHECKING:
    from lagmap.schemas import InternalConfig

__all__ = ['local_probability', 'LocalProbabilityEstimator']

logger = logging.getLogger(__name__)


def local_probability(sc, br, w: int) -> Tuple[np.ndarray, np.ndarray]:
    """Sliding-window event probability as a function of score.

    Parameters
    ----------
    sc : array_like
        Continuous scores, length N.
    br : array_like
        Binary outcomes aligned with sc; only values exactly 1 are events.
    w : int
        Integer half window, ``w >= 1`` and ``2w < N``.

    Returns
    -------
    scores : np.ndarray
        Sorted scores at positions [w, N - w).
    probs : np.ndarray
        Window probabilities at the same positions.

    Raises
    ------
    PreconditionViolation
        If sc and br differ in length or w leaves no valid output range.

    Examples
    --------
    >>> local_probability([1, 5, 2, 4, 3], [0, 1, 0, 1, 0], 1)
    (array([2., 3., 4.]), array([0. , 0.5, 0.5]))
    """
    sc = np.asarray(sc, dtype=np.float64)
    br = np.asarray(br)
    n = require_aligned(sc=sc, br=br)
    require(
        isinstance(w, (int, np.integer)) and not isinstance(w, bool),
        f"half window must be an integer, got {w!r}",
        PreconditionViolation,
    )
    require(w >= 1, f"half window must be >= 1, got {w}", PreconditionViolation)
    require(
        2 * w < n,
        f"half window {w} leaves no output for {n} observations (need 2w < N)",
        PreconditionViolation,
    )

    order = np.argsort(sc, kind="stable")
    sorted_scores = sc[order]
    events = br[order] == 1

    # Window starts and ends as a difference array; event i covers [i - w, i + w).
    centers = np.flatnonzero(events[w:n - w]) + w
    delta = np.zeros(n + 1, dtype=np.int64)
    np.add.at(delta, centers - w, 1)
    np.add.at(delta, centers + w, -1)
    z = np.cumsum(delta[:n]) / (2 * w)

    return sorted_scores[w:n - w], z[w:n - w]


class LocalProbabilityEstimator:
    """Config-driven wrapper around local_probability."""

    def __init__(self, config: "InternalConfig"):
        self.half_window = config.local_probability.half_window

    def estimate(self, sc, br) -> Tuple[np.ndarray, np.ndarray]:
        scores, probs = local_probability(sc, br, self.half_window)
        logger.debug("Local probability: %d points, w=%d, mean=%.4f",
                     len(probs), self.half_window, float(np.mean(probs)))
        return scores, probs
