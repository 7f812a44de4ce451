"""Grid stage contracts.

Enforce the guarantees that cell mapping and cell aggregation produced
well-formed output for downstream standardization and rendering.
"""

import numpy as np

from lagmap.contracts.base import require


def assert_cell_indices(row: np.ndarray, col: np.ndarray, n_obs: int) -> None:
    """Enforce mapping stage contract.

    Called immediately after GridMapper. Out-of-range indices are legal
    here; consumers filter them.

    Raises
    ------
    ContractViolation
        If indices are not integer typed or not aligned with the input.
    """
    require(
        row.dtype.kind in {"i", "u"} and col.dtype.kind in {"i", "u"},
        f"Mapping contract violated: indices dtype is {row.dtype}/{col.dtype}, expected integer"
    )
    require(
        row.ndim == 1 and col.ndim == 1,
        f"Mapping contract violated: indices have {row.ndim}/{col.ndim} dims, expected 1"
    )
    require(
        len(row) == n_obs and len(col) == n_obs,
        f"Mapping contract violated: got {len(row)}/{len(col)} indices for {n_obs} observations"
    )


def assert_cell_statistics(sums: np.ndarray, counts: np.ndarray, n_cells: int) -> None:
    """Enforce aggregation stage contract.

    Raises
    ------
    ContractViolation
        If the accumulators do not cover the grid or counts are negative.
    """
    require(
        sums.ndim == 2 and sums.shape[0] == n_cells,
        f"Aggregation contract violated: sums shape {sums.shape}, expected ({n_cells}, K)"
    )
    require(
        counts.shape == (n_cells,),
        f"Aggregation contract violated: counts shape {counts.shape}, expected ({n_cells},)"
    )
    require(
        counts.dtype.kind in {"i", "u"},
        f"Aggregation contract violated: counts dtype is {counts.dtype}, expected integer"
    )
    require(
        n_cells == 0 or counts.min() >= 0,
        "Aggregation contract violated: negative cell count"
    )
