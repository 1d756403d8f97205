"""Tidy reshaping and summarization of Bayesian posterior draws.

Turns a sampler's index-based parameter arrays into long-format tables,
restores categorical labels for integer indices, and summarizes grouped
draws with point estimates, quantile or highest-density intervals, and
level comparisons.

Usage:
    >>> from tidydraws import ParameterStore, recover_types, spec, spread_draws, mean_qi
    >>> store = ParameterStore.from_inference_data(idata)
    >>> tidy = spread_draws(store, spec("b", "group"), type_map=recover_types(data))
    >>> mean_qi(tidy, "b", group_by="group", probs=[0.66, 0.95])
"""

from tidydraws.draws import (
    Expansion,
    LevelSet,
    ParameterStore,
    TypeMap,
    Variable,
    VariableSpec,
    expand,
    expand_variable,
    gather_draws,
    join_expansions,
    recover_types,
    spec,
    spread_draws,
)
from tidydraws.errors import (
    AmbiguousLevelError,
    DimensionMismatchError,
    EmptyPartitionError,
    OutOfRangeIndexError,
    TidyDrawsError,
    UnknownVariableError,
)
from tidydraws.summary import (
    EstimateRow,
    compare_levels,
    hdi,
    mean_hdi,
    mean_qi,
    median_hdi,
    median_qi,
    mode_hdi,
    mode_qi,
    point_interval,
    qi,
    to_estimate_rows,
)

__version__ = "0.1.0"

__all__ = [
    # Store and reshaping
    "ParameterStore",
    "Variable",
    "VariableSpec",
    "Expansion",
    "spec",
    "expand",
    "expand_variable",
    "join_expansions",
    "spread_draws",
    "gather_draws",
    # Type recovery
    "LevelSet",
    "TypeMap",
    "recover_types",
    # Estimation
    "EstimateRow",
    "point_interval",
    "to_estimate_rows",
    "qi",
    "hdi",
    "mean_qi",
    "median_qi",
    "mode_qi",
    "mean_hdi",
    "median_hdi",
    "mode_hdi",
    "compare_levels",
    # Errors
    "TidyDrawsError",
    "DimensionMismatchError",
    "OutOfRangeIndexError",
    "EmptyPartitionError",
    "AmbiguousLevelError",
    "UnknownVariableError",
]
