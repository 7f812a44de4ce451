"""Test lag column schema resolution."""

import numpy as np
import pytest

from lagmap.contracts import PreconditionViolation
from lagmap.features.schema import LagSchema

pytestmark = pytest.mark.unit


def test_names_follow_lag_order():
    schema = LagSchema({"Speed": 2, "FcwRange": 1})

    assert schema.names() == ["Speed[0]", "Speed[-1]", "Speed[-2]", "FcwRange[0]", "FcwRange[-1]"]
    assert schema.count_feature == "Speed[0]"


def test_default_config_schema(internal_config):
    schema = LagSchema.from_config(internal_config)
    names = schema.names()

    assert len(names) == 62
    assert names[0] == "Speed[0]"
    assert names[30] == "Speed[-30]"
    assert names[31] == "FcwRange[0]"


def test_resolve_maps_names_to_positions():
    schema = LagSchema({"Speed": 1, "FcwRange": 0}, count_feature="FcwRange[0]")
    columns = ["Brake", "FcwRange[0]", "Speed[-1]", "Speed[0]"]

    resolved = schema.resolve(columns)

    np.testing.assert_array_equal(resolved.indices, [3, 2, 1])
    assert resolved.count_feature == 2
    assert resolved.blocks() == {"Speed": slice(0, 2), "FcwRange": slice(2, 3)}


def test_take_selects_feature_columns():
    schema = LagSchema({"Speed": 1})
    resolved = schema.resolve(["Speed[-1]", "x", "Speed[0]"])
    matrix = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])

    np.testing.assert_array_equal(resolved.take(matrix), [[3.0, 1.0], [6.0, 4.0]])


def test_missing_column_raises():
    schema = LagSchema({"Speed": 2})
    with pytest.raises(PreconditionViolation, match=r"Speed\[-2\]"):
        schema.resolve(["Speed[0]", "Speed[-1]"])


def test_unknown_count_feature_raises():
    with pytest.raises(PreconditionViolation, match="count feature"):
        LagSchema({"Speed": 1}, count_feature="Speed[-5]")
