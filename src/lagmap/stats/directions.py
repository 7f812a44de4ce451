"""Helpers for fitted direction vectors.

The fitting component reports coefficients over its own list of predictor
names; these helpers place them in the column layout of the data, project
observations onto them, and prepare them for line rendering.
"""

from typing import Sequence

import numpy as np

from lagmap.contracts import PreconditionViolation, require, require_square

__all__ = ['expand_directions', 'project', 'covariance_difference', 'unit_norm']


def expand_directions(coefs, fitted_names: Sequence[str], columns: Sequence[str]) -> np.ndarray:
    """Scatter fitted coefficient vectors into data-column coordinates.

    Parameters
    ----------
    coefs : array_like
        (D, len(fitted_names)) coefficients, one row per direction. A
        single 1-D vector is treated as D=1.
    fitted_names : sequence of str
        Predictor name for every coefficient column.
    columns : sequence of str
        Column names of the data the directions will be applied to.

    Returns
    -------
    np.ndarray
        (D, len(columns)) matrix; columns not used by the fit are zero.

    Raises
    ------
    PreconditionViolation
        If a fitted name is not a data column or shapes disagree.
    """
    coefs = np.atleast_2d(np.asarray(coefs, dtype=np.float64))
    require(
        coefs.shape[1] == len(fitted_names),
        f"{coefs.shape[1]} coefficients for {len(fitted_names)} fitted names",
        PreconditionViolation,
    )
    position = {name: k for k, name in enumerate(columns)}
    missing = [name for name in fitted_names if name not in position]
    require(not missing, f"Fitted names not found in data columns: {missing}", PreconditionViolation)

    expanded = np.zeros((coefs.shape[0], len(columns)))
    expanded[:, [position[name] for name in fitted_names]] = coefs
    return expanded


def project(data, directions) -> np.ndarray:
    """Linear scores of every observation on every direction.

    Returns an (N, D) matrix ``data @ directions.T``.
    """
    data = np.asarray(data, dtype=np.float64)
    directions = np.atleast_2d(np.asarray(directions, dtype=np.float64))
    require(
        data.ndim == 2 and data.shape[1] == directions.shape[1],
        f"data shape {data.shape} incompatible with directions shape {directions.shape}",
        PreconditionViolation,
    )
    return data @ directions.T


def covariance_difference(cov1, cov0, p: int) -> np.ndarray:
    """Elementwise ``cov1 - cov0`` for two flattened p x p matrices."""
    cov1 = np.asarray(cov1, dtype=np.float64)
    cov0 = np.asarray(cov0, dtype=np.float64)
    require_square(cov1, p, "cov1")
    require_square(cov0, p, "cov0")
    return cov1.reshape(-1) - cov0.reshape(-1)


def unit_norm(vec) -> np.ndarray:
    """Copy of vec scaled to unit L2 norm (NaN for a zero vector)."""
    vec = np.asarray(vec, dtype=np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        return vec / np.sqrt(np.sum(vec * vec))
