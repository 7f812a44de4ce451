import pytest

from lagmap.schemas.user import UserConfig

pytestmark = pytest.mark.unit


def test_uppercase_keys_are_handled():
    raw = {
        "NROW": 50,
        "MIN_COUNT": 10,
        "HALF_WINDOW": 200,
        "POWER": 1,
        "LOG_LEVEL": "debug",
    }

    user = UserConfig.model_validate(raw)

    assert user.nrow == 50
    assert user.min_count == 10
    assert user.half_window == 200
    assert isinstance(user.power, float) and user.power == 1.0
    assert user.log_level == "DEBUG"


def test_unknown_keys_are_ignored():
    raw = {"NROW": 10, "UNKNOWN_LEGACY": 12345}
    user = UserConfig.model_validate(raw)

    assert user.nrow == 10
    assert not hasattr(user, "UNKNOWN_LEGACY")


def test_overrides_only_contain_set_sections():
    overrides = UserConfig(min_count=3, n_workers=4).to_internal_overrides()

    assert overrides == {"heatmap": {"min_count": 3}, "aggregation": {"n_workers": 4}}


def test_empty_user_config_has_no_overrides():
    assert UserConfig().to_internal_overrides() == {}
