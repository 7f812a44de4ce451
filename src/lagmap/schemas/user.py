"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with flat upper-case aliases for the
settings that change most often (e.g., MIN_COUNT -> heatmap.min_count,
HALF_WINDOW -> local_probability.half_window).

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from lagmap.schemas.base import LagmapBaseModel


class UserGridConfig(LagmapBaseModel):
    """User-facing grid config."""
    nrow: Optional[int] = None
    ncol: Optional[int] = None
    row_scale: Optional[float] = None
    row_offset: Optional[float] = None
    col_scale: Optional[float] = None
    col_offset: Optional[float] = None


class UserHeatmapConfig(LagmapBaseModel):
    """User-facing heatmap config."""
    min_count: Optional[int] = None
    power: Optional[float] = None
    sentinel: Optional[float] = None


class UserFeatureConfig(LagmapBaseModel):
    """User-facing lag schema config."""
    lags: Optional[dict[str, int]] = None
    template: Optional[str] = None
    count_feature: Optional[str] = None


class UserVariablesConfig(LagmapBaseModel):
    """User-facing column names."""
    coord_x0: Optional[str] = None
    coord_x1: Optional[str] = None
    outcome: Optional[str] = None
    scores: Optional[list[str]] = None


class UserFiltersConfig(LagmapBaseModel):
    """User-facing filter config."""
    enabled: Optional[bool] = None
    speed_column: Optional[str] = None
    min_speed: Optional[float] = None
    require_equal: Optional[dict[str, float]] = None
    drop_event_continuations: Optional[bool] = None
    event_column: Optional[str] = None
    segment_column: Optional[str] = None


class UserConfig(LagmapBaseModel):
    """User-facing configuration schema.

    Minimal, forgiving, and uses common aliases. Users only specify
    what they want to override from ParamConfig defaults.

    Usage
    -----
        user_cfg = UserConfig(
            nrow=50,
            ncol=50,
            min_count=20,
            half_window=500,
        )

        internal = resolve_config(param_cfg, user_cfg)
    """

    # Grid settings (flat aliases)
    nrow: Optional[int] = Field(None, alias="NROW")
    ncol: Optional[int] = Field(None, alias="NCOL")

    # Heatmap settings (flat aliases)
    min_count: Optional[int] = Field(None, alias="MIN_COUNT")
    power: Optional[float] = Field(None, alias="POWER")

    # Local probability settings (flat aliases)
    half_window: Optional[int] = Field(None, alias="HALF_WINDOW")

    # Variables (flat aliases)
    outcome: Optional[str] = Field(None, alias="OUTCOME")
    scores: Optional[list[str]] = Field(None, alias="SCORES")

    # Operational settings
    n_workers: Optional[int] = Field(None, alias="N_WORKERS")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(None, alias="LOG_LEVEL")
    log_file: Optional[str] = Field(None, alias="LOG_FILE")

    # Nested overrides (advanced users)
    grid: Optional[UserGridConfig] = None
    heatmap: Optional[UserHeatmapConfig] = None
    features: Optional[UserFeatureConfig] = None
    variables: Optional[UserVariablesConfig] = None
    filters: Optional[UserFiltersConfig] = None

    model_config = LagmapBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("power", mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Nested sections are applied after flat aliases, so an explicit
        nested value wins over its flat alias.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        # Grid section
        grid = {}
        if self.nrow is not None:
            grid["nrow"] = self.nrow
        if self.ncol is not None:
            grid["ncol"] = self.ncol
        if self.grid is not None:
            grid.update(self.grid.model_dump(exclude_none=True))
        if grid:
            overrides["grid"] = grid

        # Heatmap section
        heatmap = {}
        if self.min_count is not None:
            heatmap["min_count"] = self.min_count
        if self.power is not None:
            heatmap["power"] = self.power
        if self.heatmap is not None:
            heatmap.update(self.heatmap.model_dump(exclude_none=True))
        if heatmap:
            overrides["heatmap"] = heatmap

        if self.half_window is not None:
            overrides["local_probability"] = {"half_window": self.half_window}

        if self.features is not None:
            features = self.features.model_dump(exclude_none=True)
            if features:
                overrides["features"] = features

        # Variables section
        variables = {}
        if self.outcome is not None:
            variables["outcome"] = self.outcome
        if self.scores is not None:
            variables["scores"] = self.scores
        if self.variables is not None:
            variables.update(self.variables.model_dump(exclude_none=True))
        if variables:
            overrides["variables"] = variables

        if self.filters is not None:
            filters = self.filters.model_dump(exclude_none=True)
            if filters:
                overrides["filters"] = filters

        if self.n_workers is not None:
            overrides["aggregation"] = {"n_workers": self.n_workers}

        logging_cfg = {}
        if self.log_level is not None:
            logging_cfg["level"] = self.log_level
        if self.log_file is not None:
            logging_cfg["log_file"] = self.log_file
        if logging_cfg:
            overrides["logging"] = logging_cfg

        return overrides
