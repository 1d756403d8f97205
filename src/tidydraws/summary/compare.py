"""Compare levels of a categorical index within each draw.

Given tidy draws with one row per (draw, level), compare_levels()
applies a comparison function to pairs of levels draw by draw, giving
the posterior of, for example, the difference between two group means.

Comparison modes:
- "pairwise": every unordered pair, later level minus earlier level
- "control": every level against a reference level
- "ordered": each level against the one before it
- an explicit list of (left, right) pairs

Level order is the categorical order of the ``by`` column when it has
one (e.g. recovered factor levels), otherwise sorted order.

Usage:
    >>> diffs = compare_levels(tidy, "group_mean", by="group")
    >>> diffs["group"].unique().tolist()
    ['y - x', 'z - x', 'z - y']
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Literal

import numpy as np
import pandas as pd
import structlog

from tidydraws.draws.store import DRAW_COLUMNS
from tidydraws.errors import AmbiguousLevelError

logger = structlog.get_logger(__name__)

__all__ = [
    "COMPARISON_FUNCTIONS",
    "compare_levels",
    "comparison_pairs",
    "level_order",
]

ComparisonMode = Literal["pairwise", "control", "ordered"]

COMPARISON_FUNCTIONS: dict[str, Callable[[Any, Any], Any]] = {
    "difference": lambda left, right: left - right,
    "ratio": lambda left, right: left / right,
}


def level_order(column: pd.Series) -> list[Any]:
    """Distinct levels present in ``column``, in declared or sorted order."""
    present = pd.unique(column.dropna())
    if isinstance(column.dtype, pd.CategoricalDtype):
        present_set = set(present)
        return [level for level in column.cat.categories if level in present_set]
    return sorted(present)


def comparison_pairs(
    levels: Sequence[Any],
    comparison: ComparisonMode | Sequence[tuple[Any, Any]] = "pairwise",
    reference: Any = None,
) -> list[tuple[Any, Any]]:
    """(left, right) level pairs for a comparison mode."""
    if not isinstance(comparison, str):
        pairs = [tuple(pair) for pair in comparison]
        unknown = sorted({str(level) for pair in pairs for level in pair if level not in levels})
        if unknown:
            raise ValueError(f"Unknown levels in comparison pairs: {unknown}")
        if len(set(pairs)) != len(pairs):
            raise ValueError("Comparison pairs must not repeat")
        return pairs
    if comparison == "pairwise":
        return [
            (levels[j], levels[i]) for i in range(len(levels)) for j in range(i + 1, len(levels))
        ]
    if comparison == "ordered":
        return [(levels[i + 1], levels[i]) for i in range(len(levels) - 1)]
    if comparison == "control":
        if reference is None:
            if not levels:
                return []
            reference = levels[0]
        if reference not in levels:
            raise ValueError(f"Reference level '{reference}' not among levels {list(levels)}")
        return [(level, reference) for level in levels if level != reference]
    raise ValueError(f"Unknown comparison '{comparison}'")


def compare_levels(
    table: pd.DataFrame,
    value: str,
    by: str,
    comparison: ComparisonMode | Sequence[tuple[Any, Any]] = "pairwise",
    fun: str | Callable[[Any, Any], Any] = "difference",
    reference: Any = None,
    group_by: str | Sequence[str] | None = None,
) -> pd.DataFrame:
    """Compare levels of ``by`` draw by draw.

    Parameters
    ----------
    table : pd.DataFrame
        Tidy draws with draw identity columns, ``by`` and ``value``.
    value : str
        Column holding the quantity to compare.
    by : str
        Categorical index column whose levels are compared.
    comparison : {"pairwise", "control", "ordered"} or list of pairs
        Which level pairs to compare.
    fun : {"difference", "ratio"} or callable
        Applied as ``fun(left, right)`` to aligned per-draw values.
    reference : optional
        Reference level for ``"control"``. Defaults to the first level.
    group_by : str or sequence of str, optional
        Further index columns to compare within (e.g. compare groups
        separately for each term).

    Returns
    -------
    pd.DataFrame
        Draw identity, ``group_by`` columns, ``by`` holding labels like
        ``"B - A"`` (ordered categorical in pair order), and ``value``.

    Raises
    ------
    AmbiguousLevelError
        If a (draw, group_by, level) combination has zero or several rows.
    """
    func = COMPARISON_FUNCTIONS[fun] if isinstance(fun, str) else fun
    groups = [group_by] if isinstance(group_by, str) else list(group_by or [])
    draw_keys = [c for c in DRAW_COLUMNS if c in table.columns]
    if not draw_keys:
        raise KeyError(f"Table has none of the draw identity columns {list(DRAW_COLUMNS)}")
    keys = draw_keys + groups
    missing = [c for c in [*keys, by, value] if c not in table.columns]
    if missing:
        raise KeyError(f"Columns not in table: {missing}")

    duplicated = table.duplicated(subset=[*keys, by], keep=False)
    if duplicated.any():
        example = table.loc[duplicated, [*keys, by]].iloc[0].to_dict()
        raise AmbiguousLevelError(
            f"More than one row per draw and level of '{by}', e.g. {example}. "
            f"Add the other index columns to group_by.",
            operation="compare_levels",
        )

    levels = level_order(table[by])
    pairs = comparison_pairs(levels, comparison, reference)

    per_draw = table.groupby(keys, observed=True, dropna=False)[by].nunique()
    if (per_draw != len(levels)).any():
        short = per_draw[per_draw != len(levels)].index[0]
        raise AmbiguousLevelError(
            f"Draw {short} has {per_draw.loc[short]} of {len(levels)} levels of '{by}'",
            operation="compare_levels",
        )

    wide = table.pivot(index=keys, columns=by, values=value)
    wide.columns = list(wide.columns)
    wide = wide.reindex(columns=levels)

    labels = [f"{left} - {right}" for left, right in pairs]
    parts = []
    for (left, right), label in zip(pairs, labels):
        part = wide.index.to_frame(index=False)
        part[by] = label
        part[value] = np.asarray(func(wide[left].to_numpy(), wide[right].to_numpy()))
        parts.append(part)

    if parts:
        result = pd.concat(parts, ignore_index=True)
    else:
        result = pd.DataFrame(columns=[*keys, by, value])
    result[by] = pd.Categorical(result[by], categories=labels, ordered=True)
    sort_keys = draw_keys[-1:] + groups + [by]
    result = result.sort_values(sort_keys, kind="mergesort").reset_index(drop=True)
    logger.debug("levels_compared", by=by, pairs=labels, rows=len(result))
    return result
