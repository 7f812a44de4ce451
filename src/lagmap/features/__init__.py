"""Feature layout and observation filtering.

- schema: Lag column naming and one-time column resolution
- filters: Boolean keep-masks for observations
"""

from lagmap.features.schema import LagSchema, ResolvedSchema
from lagmap.features.filters import select_eq, select_at_least, event_continuations, combine_masks

__all__ = [
    "LagSchema",
    "ResolvedSchema",
    "select_eq",
    "select_at_least",
    "event_continuations",
    "combine_masks",
]
