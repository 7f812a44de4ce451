"""Analysis stage contracts.

Enforce structural guarantees of the heatmap and local probability outputs.
We do NOT validate scientific correctness here, only shape and range.
"""

import numpy as np

from lagmap.contracts.base import require


def assert_rate_surface(rate: np.ndarray, denom: np.ndarray, n_cells: int,
                        sentinel: float, hit: int, missed: int, n_obs: int) -> None:
    """Enforce heatmap stage contract.

    Raises
    ------
    ContractViolation
        If the surface does not cover the grid, holds values that are
        neither a rate in [0, 1] nor the sentinel, or the diagnostics do
        not add up.
    """
    require(
        rate.shape == (n_cells,) and denom.shape == (n_cells,),
        f"Heatmap contract violated: rate/denom shapes {rate.shape}/{denom.shape}, expected ({n_cells},)"
    )
    valid = (rate == sentinel) | ((rate >= 0) & (rate <= 1))
    require(
        bool(np.all(valid)),
        "Heatmap contract violated: rate values outside [0, 1] that are not the sentinel"
    )
    require(
        hit + missed == n_obs,
        f"Heatmap contract violated: hit={hit} + missed={missed} != {n_obs} observations"
    )
    require(
        int(denom.sum()) == hit,
        f"Heatmap contract violated: cell counts sum to {int(denom.sum())}, expected hit={hit}"
    )


def assert_probability_curve(scores: np.ndarray, probs: np.ndarray,
                             n_obs: int, half_window: int) -> None:
    """Enforce local probability stage contract.

    Raises
    ------
    ContractViolation
        If the curve is not trimmed to N - 2w points, scores are not
        sorted, or probabilities leave [0, 1]. NaN scores are legal
        when they trail the sorted scores.
    """
    expected = n_obs - 2 * half_window
    require(
        len(scores) == expected and len(probs) == expected,
        f"Probability contract violated: got {len(scores)}/{len(probs)} points, expected {expected}"
    )
    # NaN scores sort last and propagate; only the non-NaN prefix is ordered
    nan_scores = np.isnan(scores)
    n_defined = int((~nan_scores).sum())
    require(
        not nan_scores[:n_defined].any(),
        "Probability contract violated: NaN scores are not trailing"
    )
    require(
        bool(np.all(np.diff(scores[:n_defined]) >= 0)),
        "Probability contract violated: scores are not sorted ascending"
    )
    defined = probs[~np.isnan(probs)]
    require(
        bool(np.all((defined >= 0) & (defined <= 1))),
        "Probability contract violated: probabilities outside [0, 1]"
    )
