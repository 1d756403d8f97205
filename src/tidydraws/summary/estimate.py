"""Grouped point and interval estimates over tidy draws.

point_interval() reduces a tidy table to one row per group, per
probability level, per value column. Grouping is always explicit via
``group_by``; the table itself carries no grouping state.

Output columns:
- the ``group_by`` columns
- .variable: value column the row summarizes
- .value: point estimate
- .lower / .upper: interval bounds
- .width: probability level
- .point / .interval: estimator names

Usage:
    >>> draws = pd.DataFrame({"group": ["A"] * 3 + ["B"] * 3, "x": [1, 2, 3, 4, 5, 6.0]})
    >>> mean_qi(draws, "x", group_by="group", probs=0.5)
      group .variable  .value  .lower  .upper  .width .point .interval
    0     A         x     2.0     1.5     2.5     0.5   mean        qi
    1     B         x     5.0     4.5     5.5     0.5   mean        qi
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Literal

import pandas as pd
import structlog

from tidydraws.config.schema import EstimationConfig
from tidydraws.draws.join import INDEX_ATTR
from tidydraws.draws.store import DRAW_COLUMNS
from tidydraws.errors import EmptyPartitionError
from tidydraws.summary.intervals import (
    INTERVALS,
    discrete_mode,
    is_discrete,
    kde_mode,
    mean,
    median,
)
from tidydraws.validation import validate_estimates

logger = structlog.get_logger(__name__)

__all__ = [
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
]

PointKind = Literal["mean", "median", "mode"]
IntervalKind = Literal["qi", "hdi"]

ESTIMATE_COLUMNS = [".variable", ".value", ".lower", ".upper", ".width", ".point", ".interval"]


@dataclass(frozen=True)
class EstimateRow:
    """One summarized group at one probability level.

    Attributes:
        group: Grouping column -> value for this row.
        variable: Summarized value column.
        value: Point estimate.
        lower: Lower interval bound.
        upper: Upper interval bound.
        width: Probability level of the interval.
        point: Point estimator name.
        interval: Interval estimator name.
    """

    variable: str
    value: Any
    lower: float
    upper: float
    width: float
    point: str
    interval: str
    group: dict[str, Any] = field(default_factory=dict)


def point_estimate(
    x: Any,
    point: PointKind = "median",
    config: EstimationConfig | None = None,
    mode_resolver: Callable[[Any], Any] | None = None,
) -> Any:
    """Point estimate of one sample.

    The mode of continuous samples comes from a kernel density estimate.
    Integer, boolean or non-numeric samples use ``mode_resolver`` (default
    discrete_mode); mean and median require numeric samples.
    """
    config = config or EstimationConfig()
    if point == "mean":
        return mean(x)
    if point == "median":
        return median(x)
    if point == "mode":
        if is_discrete(x):
            return (mode_resolver or discrete_mode)(x)
        return kde_mode(x, bw_method=config.kde_bw_method, grid_size=config.kde_grid_size)
    raise ValueError(f"Unknown point estimate '{point}'")


def _default_value_columns(table: pd.DataFrame, group_by: Sequence[str]) -> list[str]:
    excluded = set(DRAW_COLUMNS) | set(group_by) | set(table.attrs.get(INDEX_ATTR, ()))
    return [
        column
        for column in table.columns
        if column not in excluded
        and pd.api.types.is_numeric_dtype(table[column])
        and not pd.api.types.is_bool_dtype(table[column])
    ]


def _as_list(value: str | Sequence[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def point_interval(
    table: pd.DataFrame,
    value_columns: str | Sequence[str] | None = None,
    point: PointKind | None = None,
    interval: IntervalKind | None = None,
    probs: float | Sequence[float] | None = None,
    group_by: str | Sequence[str] | None = None,
    config: EstimationConfig | None = None,
    mode_resolver: Callable[[Any], Any] | None = None,
) -> pd.DataFrame:
    """Summarize value columns per group with a point and an interval.

    Parameters
    ----------
    table : pd.DataFrame
        Tidy draws, typically from spread_draws().
    value_columns : str or sequence of str, optional
        Columns to summarize. Defaults to every numeric column that is not
        a draw identity, index or grouping column. Index columns are the
        ones spread_draws() and gather_draws() record in ``table.attrs``.
    point : {"mean", "median", "mode"}, optional
        Point estimator. Defaults to ``config.point``.
    interval : {"qi", "hdi"}, optional
        Interval estimator. Defaults to ``config.interval``.
    probs : float or sequence of float, optional
        Probability levels. Defaults to ``config.probs``.
    group_by : str or sequence of str, optional
        Partition columns. Each partition is summarized independently.
    config : EstimationConfig, optional
        Defaults and KDE tuning (bandwidth and grid).
    mode_resolver : callable, optional
        Mode for discrete samples; see point_estimate().

    Returns
    -------
    pd.DataFrame
        One row per group x probability level x value column, ordered
        by group, then probability level in the order given, then value
        column.

    Raises
    ------
    EmptyPartitionError
        If a partition has no non-missing samples for a value column.
    KeyError
        If a value or grouping column is absent.
    TypeError
        If a value column is not numeric. Intervals need ordered numbers,
        so label columns cannot be summarized even when ``point="mode"``.
    """
    config = config or EstimationConfig()
    point = point or config.point
    interval = interval or config.interval
    if point not in ("mean", "median", "mode"):
        raise ValueError(f"Unknown point estimate '{point}'")
    if interval not in INTERVALS:
        raise ValueError(f"Unknown interval '{interval}'")
    if probs is None:
        prob_list = list(config.probs)
    elif isinstance(probs, (int, float)):
        prob_list = [float(probs)]
    else:
        prob_list = [float(p) for p in probs]

    groups = _as_list(group_by)
    values = _as_list(value_columns) or _default_value_columns(table, groups)
    missing = [c for c in [*groups, *values] if c not in table.columns]
    if missing:
        raise KeyError(f"Columns not in table: {missing}")
    if not values:
        raise ValueError("No value columns to summarize")
    not_numeric = [
        c
        for c in values
        if not pd.api.types.is_numeric_dtype(table[c]) or pd.api.types.is_bool_dtype(table[c])
    ]
    if not_numeric:
        raise TypeError(
            f"Value columns must be numeric to take intervals, got {not_numeric} "
            f"with dtypes {[str(table[c].dtype) for c in not_numeric]}"
        )

    if groups:
        partitions = list(table.groupby(groups, sort=True, observed=True, dropna=False))
    else:
        partitions = [((), table)]
    if not partitions:
        raise EmptyPartitionError("Table has no rows", operation="point_interval")

    rows = []
    for key, part in partitions:
        key = key if isinstance(key, tuple) else (key,)
        group_values = dict(zip(groups, key))
        samples = {}
        for column in values:
            x = part[column].dropna().to_numpy()
            if x.size == 0:
                raise EmptyPartitionError(
                    f"No samples for '{column}' in group {group_values or '(all)'}",
                    operation="point_interval",
                )
            samples[column] = (x, point_estimate(x, point, config, mode_resolver))
        for prob in prob_list:
            for column, (x, estimate) in samples.items():
                lower, upper = INTERVALS[interval](x, prob)
                rows.append(
                    {
                        **group_values,
                        ".variable": column,
                        ".value": estimate,
                        ".lower": lower,
                        ".upper": upper,
                        ".width": prob,
                        ".point": point,
                        ".interval": interval,
                    }
                )

    result = pd.DataFrame(rows, columns=[*groups, *ESTIMATE_COLUMNS])
    logger.debug(
        "point_interval",
        groups=len(partitions),
        probs=prob_list,
        value_columns=values,
        rows=len(result),
    )
    return validate_estimates(result)


def to_estimate_rows(frame: pd.DataFrame) -> list[EstimateRow]:
    """Convert a point_interval() result into EstimateRow records."""
    groups = [c for c in frame.columns if c not in ESTIMATE_COLUMNS]
    return [
        EstimateRow(
            variable=record[".variable"],
            value=record[".value"],
            lower=record[".lower"],
            upper=record[".upper"],
            width=record[".width"],
            point=record[".point"],
            interval=record[".interval"],
            group={g: record[g] for g in groups},
        )
        for record in frame.to_dict("records")
    ]


mean_qi = partial(point_interval, point="mean", interval="qi")
median_qi = partial(point_interval, point="median", interval="qi")
mode_qi = partial(point_interval, point="mode", interval="qi")
mean_hdi = partial(point_interval, point="mean", interval="hdi")
median_hdi = partial(point_interval, point="median", interval="hdi")
mode_hdi = partial(point_interval, point="mode", interval="hdi")
