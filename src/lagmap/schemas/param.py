"""ParamConfig: Expert defaults for the lagmap pipeline.

This module defines the complete default configuration. ALL pipeline
parameters must have defaults here. No runtime code should define
fallback values - this is the single source of truth for defaults.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator, model_validator
from lagmap.features.schema import LagSchema
from lagmap.schemas.base import LagmapBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class GridConfig(LagmapBaseModel):
    """Affine mapping from two coordinates to a fixed nrow x ncol grid."""
    nrow: int = Field(100, ge=1)
    ncol: int = Field(100, ge=1)
    row_scale: float = 70.0
    row_offset: float = 50.0
    col_scale: float = 15.0
    col_offset: float = 50.0

    @field_validator("row_scale", "row_offset", "col_scale", "col_offset", mode="before")
    @classmethod
    def coerce_affine_to_float(cls, v):
        """Allow int or float for affine parameters."""
        return float(v)


class HeatmapConfig(LagmapBaseModel):
    """Event-rate surface configuration."""
    min_count: int = Field(100, ge=0, description="Cells need strictly more observations than this")
    power: float = Field(0.1, gt=0, description="Stabilizing power applied to the cell rate")
    sentinel: float = Field(-1.0, description="Value written to cells with insufficient data")


class LocalProbabilityConfig(LagmapBaseModel):
    """Sliding-window probability curve configuration."""
    half_window: int = Field(3000, ge=1)


class FeatureConfig(LagmapBaseModel):
    """Lagged feature schema.

    ``lags`` maps each base variable to its maximum lag; columns
    ``name[0], name[-1], ..., name[-max_lag]`` are tracked per variable,
    in insertion order.
    """
    lags: dict[str, int] = Field(default_factory=lambda: {"Speed": 30, "FcwRange": 30})
    template: str = "{name}[{lag}]"
    count_feature: str = "Speed[0]"

    @field_validator("lags")
    @classmethod
    def check_lags(cls, v):
        """At least one variable, no negative lags."""
        if not v:
            raise ValueError("at least one lagged variable is required")
        for name, max_lag in v.items():
            if max_lag < 0:
                raise ValueError(f"max lag for '{name}' must be >= 0, got {max_lag}")
        return v

    @model_validator(mode="after")
    def check_count_feature(self):
        """count_feature must name one of the generated lag columns."""
        if self.count_feature not in LagSchema(self.lags, self.template).names():
            raise ValueError(f"count_feature '{self.count_feature}' is not one of the lag columns")
        return self


class VariablesConfig(LagmapBaseModel):
    """Column names resolved once when the processor is constructed."""
    coord_x0: str = "dr1"
    coord_x1: str = "dr2"
    outcome: str = "Brake"
    scores: list[str] = Field(default_factory=lambda: ["dr0", "dr1", "dr2"])


class FiltersConfig(LagmapBaseModel):
    """Observation filters applied before analysis."""
    enabled: bool = True
    speed_column: Optional[str] = "Speed[0]"
    min_speed: Optional[float] = 7.0
    require_equal: dict[str, float] = Field(default_factory=lambda: {"FcwValidTarget": 1.0})
    drop_event_continuations: bool = True
    event_column: str = "Brake"
    segment_column: Optional[str] = "Trip"

    @model_validator(mode="after")
    def check_speed_pair(self):
        """Speed filter needs both a column and a threshold."""
        if (self.speed_column is None) != (self.min_speed is None):
            raise ValueError("speed_column and min_speed must be set together")
        return self


class AggregationConfig(LagmapBaseModel):
    """Fan-out settings for chunked cell aggregation."""
    n_workers: int = Field(1, ge=1, le=64)


class LoggingConfig(LagmapBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: Optional[str] = None


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(LagmapBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all pipeline parameters.
    Every tunable parameter MUST have a default here.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg)

    Runtime code only sees InternalConfig.
    """

    grid: GridConfig = Field(default_factory=GridConfig)
    heatmap: HeatmapConfig = Field(default_factory=HeatmapConfig)
    local_probability: LocalProbabilityConfig = Field(default_factory=LocalProbabilityConfig)
    features: FeatureConfig = Field(default_factory=FeatureConfig)
    variables: VariablesConfig = Field(default_factory=VariablesConfig)
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
