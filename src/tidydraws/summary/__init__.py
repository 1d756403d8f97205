"""Point estimates, intervals and level comparisons over tidy draws."""

from .compare import COMPARISON_FUNCTIONS, compare_levels, comparison_pairs, level_order
from .estimate import (
    EstimateRow,
    mean_hdi,
    mean_qi,
    median_hdi,
    median_qi,
    mode_hdi,
    mode_qi,
    point_estimate,
    point_interval,
    to_estimate_rows,
)
from .intervals import discrete_mode, hdi, kde_mode, qi

__all__ = [
    # intervals
    "discrete_mode",
    "hdi",
    "kde_mode",
    "qi",
    # estimate
    "EstimateRow",
    "mean_hdi",
    "mean_qi",
    "median_hdi",
    "median_qi",
    "mode_hdi",
    "mode_qi",
    "point_estimate",
    "point_interval",
    "to_estimate_rows",
    # compare
    "COMPARISON_FUNCTIONS",
    "compare_levels",
    "comparison_pairs",
    "level_order",
]
