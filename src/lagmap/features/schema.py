"""Lagged feature column schema.

Lagged columns are named from a base variable and a lag offset, e.g.
``Speed[0], Speed[-1], ..., Speed[-30]``. The schema lists them in a fixed
order and resolves them against the data columns exactly once, so that the
processing stages work with integer positions only.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Mapping, Sequence

import numpy as np

from lagmap.contracts import PreconditionViolation, require

if TYPE_CHECKING:
    from lagmap.schemas import InternalConfig

__all__ = ['LagSchema', 'ResolvedSchema']

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSchema:
    """Lag schema bound to a concrete column layout.

    Attributes
    ----------
    names : list of str
        Feature column names, in feature order.
    indices : np.ndarray
        Position of every feature in the data columns.
    count_feature : int
        Position of the count-defining column within the feature block.
    spans : dict
        Base variable -> (start, stop) within the feature block.
    """
    names: List[str]
    indices: np.ndarray
    count_feature: int
    spans: Dict[str, tuple]

    @property
    def n_features(self) -> int:
        return len(self.names)

    def blocks(self) -> Dict[str, slice]:
        """Slice of the feature block belonging to each base variable."""
        return {name: slice(start, stop) for name, (start, stop) in self.spans.items()}

    def take(self, matrix: np.ndarray) -> np.ndarray:
        """Select the feature columns from an (N, n_columns) matrix."""
        return np.asarray(matrix)[:, self.indices]


class LagSchema:
    """Ordered lag columns for a set of base variables.

    Examples
    --------
    >>> schema = LagSchema({"Speed": 2, "FcwRange": 1})
    >>> schema.names()
    ['Speed[0]', 'Speed[-1]', 'Speed[-2]', 'FcwRange[0]', 'FcwRange[-1]']
    """

    def __init__(self, lags: Mapping[str, int], template: str = "{name}[{lag}]",
                 count_feature: str = None):
        require(len(lags) > 0, "Lag schema needs at least one variable", PreconditionViolation)
        self.lags = dict(lags)
        self.template = template
        names = self.names()
        self.count_feature = count_feature if count_feature is not None else names[0]
        require(
            self.count_feature in names,
            f"count feature '{self.count_feature}' is not one of the lag columns",
            PreconditionViolation,
        )

    @classmethod
    def from_config(cls, config: "InternalConfig") -> "LagSchema":
        features = config.features
        return cls(features.lags, features.template, features.count_feature)

    def column(self, name: str, lag: int) -> str:
        """Column name of ``name`` at ``lag`` steps back."""
        return self.template.format(name=name, lag=-lag)

    def names(self) -> List[str]:
        return [self.column(name, k)
                for name, max_lag in self.lags.items()
                for k in range(max_lag + 1)]

    def resolve(self, columns: Sequence[str]) -> ResolvedSchema:
        """Resolve every lag column to its position in ``columns``.

        Raises
        ------
        PreconditionViolation
            If a lag column is missing from ``columns``.
        """
        position = {name: k for k, name in enumerate(columns)}
        names = self.names()
        missing = [name for name in names if name not in position]
        require(not missing, f"Lag columns not found in data: {missing}", PreconditionViolation)

        spans = {}
        start = 0
        for name, max_lag in self.lags.items():
            spans[name] = (start, start + max_lag + 1)
            start += max_lag + 1

        resolved = ResolvedSchema(
            names=names,
            indices=np.array([position[name] for name in names], dtype=np.intp),
            count_feature=names.index(self.count_feature),
            spans=spans,
        )
        logger.debug("Resolved %d lag columns (count feature '%s' at %d)",
                     resolved.n_features, self.count_feature, resolved.count_feature)
        return resolved
