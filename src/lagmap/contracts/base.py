"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts
and preconditions.
"""

from typing import Type

import numpy as np

from lagmap.contracts.failure import ContractViolation, PreconditionViolation


def require(condition: bool, message: str,
            error: Type[ContractViolation] = ContractViolation) -> None:
    """Enforce a contract.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.

    message : str
        Error message explaining the violation (for debugging).

    error : type, optional
        Exception class to raise. ``ContractViolation`` for stage output
        checks, ``PreconditionViolation`` for caller input checks.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(row.shape == col.shape, "Grid contract: row/col shape mismatch")
    >>> require(w >= 1, "window must be >= 1", PreconditionViolation)
    """
    if not condition:
        raise error(message)


def require_aligned(**arrays) -> int:
    """Check that all named 1-D arrays share one length and return it."""
    lengths = {name: len(values) for name, values in arrays.items()}
    require(
        len(set(lengths.values())) <= 1,
        f"Parallel arrays must have equal length, got {lengths}",
        PreconditionViolation,
    )
    return next(iter(lengths.values()), 0)


def require_square(matrix: np.ndarray, p: int, name: str = "matrix") -> None:
    """Check that a flattened matrix holds exactly p*p entries."""
    require(p >= 1, f"{name}: dimension must be >= 1, got {p}", PreconditionViolation)
    require(
        np.size(matrix) == p * p,
        f"{name}: expected {p}x{p}={p * p} entries, got {np.size(matrix)}",
        PreconditionViolation,
    )
