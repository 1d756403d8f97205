"""Tests for compare_levels()."""

import numpy as np
import pandas as pd
import pytest

from tidydraws.draws.expand import spec
from tidydraws.draws.join import spread_draws
from tidydraws.errors import AmbiguousLevelError
from tidydraws.summary.compare import compare_levels, comparison_pairs, level_order


@pytest.fixture
def level_draws():
    """Two draws of three levels with easy arithmetic."""
    return pd.DataFrame(
        {
            ".chain": [1] * 6,
            ".iteration": [1, 1, 1, 2, 2, 2],
            ".draw": [1, 1, 1, 2, 2, 2],
            "condition": ["a", "b", "c"] * 2,
            "mu": [1.0, 2.0, 4.0, 10.0, 30.0, 50.0],
        }
    )


class TestComparisonPairs:
    """Tests for level ordering and pair enumeration."""

    def test_pairwise(self):
        assert comparison_pairs(["a", "b", "c"], "pairwise") == [("b", "a"), ("c", "a"), ("c", "b")]

    def test_control_default_reference(self):
        assert comparison_pairs(["a", "b", "c"], "control") == [("b", "a"), ("c", "a")]

    def test_control_reference(self):
        assert comparison_pairs(["a", "b", "c"], "control", reference="b") == [
            ("a", "b"), ("c", "b"),
        ]

    def test_ordered(self):
        assert comparison_pairs(["a", "b", "c"], "ordered") == [("b", "a"), ("c", "b")]

    def test_unknown_reference(self):
        with pytest.raises(ValueError, match="Reference"):
            comparison_pairs(["a", "b"], "control", reference="z")

    def test_explicit_pairs_checked(self):
        with pytest.raises(ValueError, match="Unknown levels"):
            comparison_pairs(["a", "b"], [("a", "z")])

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown comparison"):
            comparison_pairs(["a", "b"], "everything")

    def test_level_order_categorical(self):
        column = pd.Series(pd.Categorical(["y", "x"], categories=["z", "y", "x"]))
        assert level_order(column) == ["y", "x"]

    def test_level_order_sorted(self):
        assert level_order(pd.Series([3, 1, 2, 1])) == [1, 2, 3]


class TestCompareLevels:
    """Tests for compare_levels() values and layout."""

    def test_pairwise_differences(self, level_draws):
        result = compare_levels(level_draws, "mu", by="condition")
        assert result.columns.tolist() == [".chain", ".iteration", ".draw", "condition", "mu"]
        first = result[result[".draw"] == 1]
        assert first["condition"].tolist() == ["b - a", "c - a", "c - b"]
        assert first["mu"].tolist() == [1.0, 3.0, 2.0]

    def test_labels_ordered_categorical(self, level_draws):
        result = compare_levels(level_draws, "mu", by="condition")
        assert result["condition"].cat.ordered
        assert list(result["condition"].cat.categories) == ["b - a", "c - a", "c - b"]

    def test_symmetry(self, level_draws):
        forward = compare_levels(level_draws, "mu", by="condition", comparison=[("a", "b")])
        backward = compare_levels(level_draws, "mu", by="condition", comparison=[("b", "a")])
        np.testing.assert_array_equal(forward["mu"].to_numpy(), -backward["mu"].to_numpy())

    def test_control(self, level_draws):
        result = compare_levels(
            level_draws, "mu", by="condition", comparison="control", reference="c"
        )
        second = result[result[".draw"] == 2]
        assert second["condition"].tolist() == ["a - c", "b - c"]
        assert second["mu"].tolist() == [-40.0, -20.0]

    def test_ratio(self, level_draws):
        result = compare_levels(level_draws, "mu", by="condition", comparison="ordered", fun="ratio")
        assert result["mu"].tolist() == [2.0, 2.0, 3.0, 50.0 / 30.0]

    def test_custom_function(self, level_draws):
        result = compare_levels(
            level_draws,
            "mu",
            by="condition",
            comparison=[("c", "a")],
            fun=lambda left, right: np.log(left / right),
        )
        np.testing.assert_allclose(result["mu"], [np.log(4.0), np.log(5.0)])

    def test_level_order_from_categories(self, level_draws):
        draws = level_draws.assign(
            condition=pd.Categorical(level_draws["condition"], categories=["c", "b", "a"])
        )
        result = compare_levels(draws, "mu", by="condition", comparison="ordered")
        assert result[result[".draw"] == 1]["condition"].tolist() == ["b - c", "a - b"]

    def test_duplicate_rows_are_ambiguous(self, level_draws):
        doubled = pd.concat([level_draws, level_draws], ignore_index=True)
        with pytest.raises(AmbiguousLevelError, match="More than one row"):
            compare_levels(doubled, "mu", by="condition")

    def test_missing_level_is_ambiguous(self, level_draws):
        with pytest.raises(AmbiguousLevelError, match="levels"):
            compare_levels(level_draws.drop(index=5), "mu", by="condition")

    def test_missing_column(self, level_draws):
        with pytest.raises(KeyError):
            compare_levels(level_draws, "sigma", by="condition")


class TestCompareSpreadDraws:
    """compare_levels() on spread_draws() output with recovered labels."""

    def test_extra_index_needs_group_by(self, store, type_map):
        tidy = spread_draws(store, spec("b", "group", "term"), type_map=type_map)
        with pytest.raises(AmbiguousLevelError):
            compare_levels(tidy, "b", by="group")

    def test_group_by_other_index(self, store, type_map):
        tidy = spread_draws(store, spec("b", "group", "term"), type_map=type_map)
        result = compare_levels(tidy, "b", by="group", group_by="term")
        assert len(result) == 4 * 2 * 3
        samples = store.variable("b").samples
        row = result[
            (result[".draw"] == 3) & (result["term"] == "high") & (result["group"] == "y - z")
        ]
        # levels declared [z, x, y]: y is index 3, z is index 1
        assert row["b"].item() == samples[2, 2, 1] - samples[2, 0, 1]

    def test_recovered_level_labels(self, store, type_map):
        tidy = spread_draws(store, spec("group_mean", "group"), type_map=type_map)
        result = compare_levels(tidy, "group_mean", by="group")
        assert list(result["group"].cat.categories) == ["x - z", "y - z", "y - x"]
