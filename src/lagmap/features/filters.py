"""Observation filters.

Each filter returns a boolean keep-mask aligned with its input; masks are
combined with combine_masks and applied by the caller. Filters never
reorder observations.
"""

from typing import Optional

import numpy as np

from lagmap.contracts import PreconditionViolation, require, require_aligned

__all__ = ['select_eq', 'select_at_least', 'event_continuations', 'combine_masks']


def select_eq(values, target: float) -> np.ndarray:
    """Keep rows whose value equals ``target``."""
    return np.asarray(values) == target


def select_at_least(values, threshold: float) -> np.ndarray:
    """Keep rows whose value is not below ``threshold``.

    NaN values are dropped.
    """
    return np.asarray(values, dtype=np.float64) >= threshold


def event_continuations(events, segments: Optional[np.ndarray] = None) -> np.ndarray:
    """Flag the rows of an event episode after its first time point.

    Row i is flagged when ``events[i] == 1`` and ``events[i - 1] == 1``
    within the same segment. The first row of every segment is never
    flagged. Dropping flagged rows keeps only event onsets.

    Parameters
    ----------
    events : array_like
        Binary event indicator, length N.
    segments : array_like, optional
        Segment id per row (e.g. trip); a change of id starts a new segment.

    Returns
    -------
    np.ndarray
        Boolean array, True for continuation rows.
    """
    active = np.asarray(events) == 1
    flagged = np.zeros(len(active), dtype=bool)
    if len(active) < 2:
        return flagged

    flagged[1:] = active[1:] & active[:-1]
    if segments is not None:
        segments = np.asarray(segments)
        require_aligned(events=active, segments=segments)
        flagged[1:] &= segments[1:] == segments[:-1]
    return flagged


def combine_masks(*masks) -> np.ndarray:
    """Elementwise AND of equally long boolean masks."""
    require(len(masks) > 0, "combine_masks needs at least one mask", PreconditionViolation)
    arrays = [np.asarray(m, dtype=bool) for m in masks]
    require_aligned(**{f"mask_{k}": m for k, m in enumerate(arrays)})
    return np.logical_and.reduce(arrays)
