"""Tests for expanding one variable into long-format rows."""

import numpy as np
import pandas as pd
import pytest

from tidydraws.draws.expand import expand, expand_variable, spec
from tidydraws.draws.recovery import recover_types
from tidydraws.draws.store import ParameterStore
from tidydraws.errors import DimensionMismatchError, OutOfRangeIndexError, UnknownVariableError

DRAW_COLUMNS = [".chain", ".iteration", ".draw"]


class TestExpandVariable:
    """Tests for expand_variable() row layout."""

    def test_row_count_is_draws_times_cells(self, store):
        frame = expand_variable(store, spec("b", "group", "term"))
        assert len(frame) == 4 * 3 * 2

    def test_each_index_tuple_once_per_draw(self, store):
        frame = expand_variable(store, spec("b", "group", "term"))
        counts = frame.groupby([".draw", "group", "term"]).size()
        assert (counts == 1).all()
        assert len(counts) == 4 * 3 * 2

    def test_columns(self, store):
        frame = expand_variable(store, spec("b", "group", "term"))
        assert frame.columns.tolist() == [*DRAW_COLUMNS, "group", "term", "b"]

    def test_scalar_has_no_index_columns(self, store):
        frame = expand_variable(store, spec("mu"))
        assert frame.columns.tolist() == [*DRAW_COLUMNS, "mu"]
        assert frame["mu"].tolist() == [0.0, 1.0, 2.0, 3.0]

    def test_values_addressed_by_draw_and_index(self, store):
        samples = store.variable("b").samples
        frame = expand_variable(store, spec("b", "group", "term"))
        for row in frame.itertuples(index=False):
            draw, group, term, value = row[2], row[3], row[4], row[5]
            assert value == samples[draw - 1, group - 1, term - 1]

    def test_indices_are_one_based(self, store):
        frame = expand_variable(store, spec("group_mean", "group"))
        assert sorted(frame["group"].unique()) == [1, 2, 3]

    def test_rows_ordered_by_draw_then_index(self, store):
        frame = expand_variable(store, spec("b", "group", "term"))
        first_draw = frame[frame[".draw"] == 1]
        assert list(zip(first_draw["group"], first_draw["term"])) == [
            (1, 1), (1, 2), (2, 1), (2, 2), (3, 1), (3, 2),
        ]

    def test_draw_identity_repeated_per_cell(self, store):
        frame = expand_variable(store, spec("group_mean", "group"))
        assert frame[".chain"].tolist() == [1] * 6 + [2] * 6
        assert frame[".iteration"].tolist() == [1] * 3 + [2] * 3 + [1] * 3 + [2] * 3


class TestBindings:
    """Tests for dimension name binding rules."""

    def test_unbound_trailing_dimension_kept(self, store):
        frame = expand_variable(store, spec("b", "group"))
        assert frame.columns.tolist() == [*DRAW_COLUMNS, "group", "b_dim_1", "b"]
        assert len(frame) == 4 * 3 * 2

    def test_no_bindings_on_indexed_variable(self, store):
        frame = expand_variable(store, spec("b"))
        assert frame.columns.tolist() == [*DRAW_COLUMNS, "b_dim_0", "b_dim_1", "b"]

    def test_too_many_bindings(self, store):
        with pytest.raises(DimensionMismatchError, match="1 dimension"):
            expand_variable(store, spec("group_mean", "group", "term"))

    def test_names_on_scalar(self, store):
        with pytest.raises(DimensionMismatchError):
            expand_variable(store, spec("mu", "group"))

    def test_repeated_name(self, store):
        with pytest.raises(DimensionMismatchError, match="more than one"):
            expand_variable(store, spec("b", "group", "group"))

    def test_reserved_name(self, store):
        with pytest.raises(DimensionMismatchError, match="reserved"):
            expand_variable(store, spec("group_mean", ".draw"))

    def test_unknown_variable(self, store):
        with pytest.raises(UnknownVariableError):
            expand_variable(store, spec("sigma"))

    def test_expansion_records_sizes(self, store):
        expansion = expand(store, spec("b", "group"))
        assert expansion.variable == "b"
        assert expansion.dim_sizes == {"group": 3, "b_dim_1": 2}
        assert expansion.dims == ["group", "b_dim_1"]


class TestRecoveredLabels:
    """Tests for label recovery during expansion."""

    def test_index_two_maps_to_y(self):
        """A size-3 'group' dimension with levels [x, y, z]: index 2 is 'y'."""
        store = ParameterStore({"group_mean": np.array([[10.0, 20.0, 30.0]])})
        ref = pd.DataFrame({"group": pd.Categorical(["x", "y", "z"])})
        frame = expand_variable(store, spec("group_mean", "group"), recover_types(ref))
        assert frame["group"].tolist() == ["x", "y", "z"]
        assert frame.loc[frame["group"] == "y", "group_mean"].item() == 20.0

    def test_labels_are_categorical_in_level_order(self, store, type_map):
        frame = expand_variable(store, spec("b", "group", "term"), type_map)
        assert isinstance(frame["group"].dtype, pd.CategoricalDtype)
        assert list(frame["group"].cat.categories) == ["z", "x", "y"]
        assert frame["term"].cat.ordered
        first_draw = frame[frame[".draw"] == 1]
        assert first_draw["group"].tolist() == ["z", "z", "x", "x", "y", "y"]

    def test_unmapped_dimension_stays_numeric(self, store, type_map):
        frame = expand_variable(store, spec("b", "group", "level"), type_map)
        assert frame["level"].tolist()[:2] == [1, 2]

    def test_dimension_larger_than_levels(self, type_map):
        store = ParameterStore({"t": np.zeros((2, 3))})
        with pytest.raises(OutOfRangeIndexError, match="term"):
            expand_variable(store, spec("t", "term"), type_map)
