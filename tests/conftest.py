"""Root-level pytest fixtures for the lagmap test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture. Tests use these fixtures instead of raw dict configs.
"""

import pytest

from lagmap.schemas import ParamConfig, UserConfig, resolve_config


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_mapper_init(internal_config):
    ...     mapper = GridMapper(internal_config)
    ...     assert mapper.nrow == 100
    """
    return resolve_config(param_config, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_small_grid(make_config):
    ...     config = make_config(nrow=4, ncol=4, min_count=1)
    ...     assert config.grid.nrow == 4
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user)
        else:
            return resolve_config(param_config, None)

    return _make


@pytest.fixture
def unit_grid_config(make_config):
    """4x4 grid where row = floor(x0), col = floor(x1)."""
    return make_config(
        grid={"nrow": 4, "ncol": 4, "row_scale": 1, "row_offset": 0,
              "col_scale": 1, "col_offset": 0},
        min_count=1,
    )
