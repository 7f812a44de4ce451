"""Covariance-to-correlation conversion and direction normalization.

Matrices are flattened p x p arrays in row-major order, as produced by the
(external) fitting component; 2-D arrays are accepted too.
"""

import logging

import numpy as np

from lagmap.contracts import PreconditionViolation, require, require_square

__all__ = ['to_correlation', 'quadratic_form', 'normalize_direction']

logger = logging.getLogger(__name__)


def _as_matrix(cov, p: int, name: str = "cov") -> np.ndarray:
    cov = np.asarray(cov, dtype=np.float64)
    require_square(cov, p, name)
    return cov.reshape(p, p)


def to_correlation(cov, p: int, validate: bool = True) -> np.ndarray:
    """Convert a covariance matrix to a correlation matrix.

    Entry (i, j) becomes ``cov[i, j] / sqrt(cov[i, i] * cov[j, j])``.

    Parameters
    ----------
    cov : array_like
        Flattened p*p (or p x p) covariance matrix.
    p : int
        Matrix dimension.
    validate : bool, default True
        If True, a non-positive (or NaN) diagonal entry raises. If False,
        such entries produce NaN/Inf in the output, unclamped, so that
        callers rendering raw matrices can still see degenerate rows.

    Returns
    -------
    np.ndarray
        Flattened p*p correlation matrix (same layout as a flat input).

    Raises
    ------
    PreconditionViolation
        If cov does not hold p*p entries, or validate is True and the
        diagonal is not strictly positive.
    """
    matrix = _as_matrix(cov, p)
    diag = np.diag(matrix)
    if validate:
        bad = np.flatnonzero(~(diag > 0))
        require(
            bad.size == 0,
            f"Correlation requires a strictly positive diagonal; bad entries at {bad.tolist()}",
            PreconditionViolation,
        )

    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.sqrt(diag)
        corr = matrix / np.outer(s, s)
    return corr.reshape(-1) if np.ndim(cov) == 1 else corr


def quadratic_form(vec, cov, p: int) -> float:
    """Return sum_i sum_j vec[i] * vec[j] * cov[i, j].

    Only the lower triangle of cov is read: cross terms are taken once with
    a factor of 2, diagonal terms once. For a symmetric matrix this equals
    ``vec @ cov @ vec``.
    """
    vec = np.asarray(vec, dtype=np.float64)
    require(vec.shape == (p,), f"vec must have length {p}, got shape {vec.shape}",
            PreconditionViolation)
    matrix = _as_matrix(cov, p)
    terms = np.outer(vec, vec) * matrix
    return float(np.trace(terms) + 2 * np.tril(terms, k=-1).sum())


def normalize_direction(vec: np.ndarray, cov, p: int) -> np.ndarray:
    """Scale ``vec`` IN PLACE to unit quadratic form under ``cov``.

    Afterwards ``quadratic_form(vec, cov, p) == 1``, i.e. the linear
    combination has unit variance. A zero or negative quadratic form leaves
    NaN/Inf in ``vec``; that is the degenerate-input signal for the caller.

    Parameters
    ----------
    vec : np.ndarray
        Length-p float coefficient vector. Modified in place.
    cov : array_like
        Flattened p*p covariance matrix (need not be a correlation matrix).
    p : int
        Dimension.

    Returns
    -------
    np.ndarray
        The same ``vec`` object, for chaining.
    """
    require(
        isinstance(vec, np.ndarray) and vec.dtype.kind == "f",
        "vec must be a float ndarray (it is normalized in place)",
        PreconditionViolation,
    )
    q = quadratic_form(vec, cov, p)
    if not q > 0:
        logger.warning("Direction normalization: non-positive quadratic form %s", q)

    with np.errstate(divide="ignore", invalid="ignore"):
        vec *= 1 / np.sqrt(q)
    return vec
