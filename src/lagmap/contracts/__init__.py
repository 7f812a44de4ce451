"""Pipeline contracts - fail-fast enforcement of stage invariants.

Contracts fail immediately and loudly when inputs are structurally
invalid or a stage does not produce its promised invariants.

Key principle:
- Pydantic validates config correctness
- Contracts validate input structure and pipeline correctness
- Numeric degeneracies propagate as NaN/Inf or sentinels
"""

from lagmap.contracts.failure import ContractViolation, PreconditionViolation
from lagmap.contracts.base import require, require_aligned, require_square
from lagmap.contracts.grid import assert_cell_indices, assert_cell_statistics
from lagmap.contracts.analysis import assert_rate_surface, assert_probability_curve

__all__ = [
    "ContractViolation",
    "PreconditionViolation",
    "require",
    "require_aligned",
    "require_square",
    "assert_cell_indices",
    "assert_cell_statistics",
    "assert_rate_surface",
    "assert_probability_curve",
]
