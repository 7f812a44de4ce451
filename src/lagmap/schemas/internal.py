"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and contains NO optional fields that processing code depends on.

All .get() calls, fallback defaults, and validation logic are FORBIDDEN in
runtime code - everything is explicit here.
"""

from typing import Literal, Optional
from pydantic import Field, ConfigDict, model_validator
from lagmap.features.schema import LagSchema
from lagmap.schemas.base import LagmapBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalGridConfig(LagmapBaseModel):
    """Runtime grid configuration."""
    nrow: int = Field(ge=1)
    ncol: int = Field(ge=1)
    row_scale: float
    row_offset: float
    col_scale: float
    col_offset: float


class InternalHeatmapConfig(LagmapBaseModel):
    """Runtime heatmap configuration."""
    min_count: int = Field(ge=0)
    power: float = Field(gt=0)
    sentinel: float


class InternalLocalProbabilityConfig(LagmapBaseModel):
    """Runtime local probability configuration."""
    half_window: int = Field(ge=1)


class InternalFeatureConfig(LagmapBaseModel):
    """Runtime lag schema."""
    lags: dict[str, int]
    template: str
    count_feature: str

    @model_validator(mode="after")
    def check_count_feature(self):
        """count_feature must name one of the generated lag columns."""
        names = LagSchema(self.lags, self.template).names()
        if self.count_feature not in names:
            raise ValueError(
                f"count_feature '{self.count_feature}' is not one of the lag columns {names}"
            )
        return self


class InternalVariablesConfig(LagmapBaseModel):
    """Runtime column names."""
    coord_x0: str
    coord_x1: str
    outcome: str
    scores: list[str]


class InternalFiltersConfig(LagmapBaseModel):
    """Runtime observation filters."""
    enabled: bool
    speed_column: Optional[str]
    min_speed: Optional[float]
    require_equal: dict[str, float]
    drop_event_continuations: bool
    event_column: str
    segment_column: Optional[str]


class InternalAggregationConfig(LagmapBaseModel):
    """Runtime aggregation fan-out."""
    n_workers: int = Field(ge=1, le=64)


class InternalLoggingConfig(LagmapBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    log_file: Optional[str]


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(LagmapBaseModel):
    """Authoritative runtime configuration.

    This is the ONLY configuration schema that processing code sees.
    It is fully validated, immutable, and contains explicit values for
    all parameters.

    Usage
    -----
    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.min_count = config.heatmap.min_count  # NOT .get()
            self.nrow = config.grid.nrow

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation

    All of that happens during config resolution, not in runtime code.
    """

    grid: InternalGridConfig
    heatmap: InternalHeatmapConfig
    local_probability: InternalLocalProbabilityConfig
    features: InternalFeatureConfig
    variables: InternalVariablesConfig
    filters: InternalFiltersConfig
    aggregation: InternalAggregationConfig
    logging: InternalLoggingConfig

    model_config = ConfigDict(
        extra='forbid',
        frozen=True,              # Immutable after construction
        str_strip_whitespace=True,
    )
