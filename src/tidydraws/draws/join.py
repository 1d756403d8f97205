"""Join expansions of several variables into one tidy table.

Variables that share an index name range over the same index domain and
are matched on it. Variables with no shared index are repeated across
the other variables' index combinations within the same draw. Draw
identity is part of every join key, so a row never mixes draws.

Usage:
    >>> tidy = spread_draws(
    ...     store,
    ...     spec("mu"),
    ...     spec("group_mean", "group"),
    ...     type_map=recover_types(reference),
    ... )
    >>> tidy.columns.tolist()
    ['.chain', '.iteration', '.draw', 'group', 'mu', 'group_mean']
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
import structlog

from tidydraws.draws.expand import Expansion, VariableSpec, expand
from tidydraws.draws.recovery import TypeMap
from tidydraws.draws.store import DRAW, DRAW_COLUMNS, ParameterStore
from tidydraws.errors import DimensionMismatchError
from tidydraws.validation import validate_tidy_draws

logger = structlog.get_logger(__name__)

__all__ = [
    "INDEX_ATTR",
    "VALUE",
    "VARIABLE",
    "gather_draws",
    "join_expansions",
    "spread_draws",
]

VARIABLE = ".variable"
VALUE = ".value"

# DataFrame.attrs key listing the index columns of a tidy table
INDEX_ATTR = "tidydraws_index"


def _check_names(expansions: Sequence[Expansion]) -> None:
    seen: set[str] = set()
    all_dims = {dim for expansion in expansions for dim in expansion.dims}
    for expansion in expansions:
        if expansion.variable in seen:
            raise ValueError(f"Variable '{expansion.variable}' requested more than once")
        if expansion.variable in all_dims:
            raise ValueError(
                f"Variable '{expansion.variable}' has the same name as an index column"
            )
        seen.add(expansion.variable)


def join_expansions(expansions: Sequence[Expansion]) -> pd.DataFrame:
    """Combine expansions into one wide tidy table.

    Parameters
    ----------
    expansions : sequence of Expansion
        Expansions from the same store, in requested column order.

    Returns
    -------
    pd.DataFrame
        Columns: draw identity, index columns in first-appearance order,
        then one value column per variable. Rows sorted by ``.draw`` and
        then by the index columns (level order for recovered labels).

    Raises
    ------
    DimensionMismatchError
        If two variables share an index name but differ in its size.
    ValueError
        If a variable appears twice or collides with an index name.
    pandera.errors.SchemaError
        If an index combination repeats within a draw.
    """
    if not expansions:
        raise ValueError("At least one variable is required")
    _check_names(expansions)

    sizes: dict[str, tuple[str, int]] = {}
    for expansion in expansions:
        for dim, size in expansion.dim_sizes.items():
            if dim in sizes and sizes[dim][1] != size:
                owner, other = sizes[dim]
                raise DimensionMismatchError(
                    f"Index '{dim}' has size {other} in '{owner}' but {size} in "
                    f"'{expansion.variable}'",
                    operation="join",
                )
            sizes.setdefault(dim, (expansion.variable, size))

    joined = expansions[0].frame
    joined_dims = list(expansions[0].dims)
    for expansion in expansions[1:]:
        shared = [dim for dim in expansion.dims if dim in joined_dims]
        keys = [*DRAW_COLUMNS, *shared]
        logger.debug("join_step", variable=expansion.variable, keys=keys)
        joined = joined.merge(expansion.frame, on=keys, how="inner", sort=False)
        joined_dims.extend(dim for dim in expansion.dims if dim not in joined_dims)

    value_columns = [expansion.variable for expansion in expansions]
    joined = joined[[*DRAW_COLUMNS, *joined_dims, *value_columns]]
    joined = joined.sort_values([DRAW, *joined_dims], kind="mergesort").reset_index(drop=True)
    joined = validate_tidy_draws(joined, joined_dims)
    joined.attrs[INDEX_ATTR] = list(joined_dims)
    logger.debug(
        "draws_joined",
        variables=value_columns,
        dims=joined_dims,
        rows=len(joined),
    )
    return joined


def spread_draws(
    store: ParameterStore,
    *specs: VariableSpec,
    type_map: TypeMap | None = None,
) -> pd.DataFrame:
    """Wide tidy table with one column per requested variable.

    Example:
        >>> spread_draws(store, spec("b", "group"), spec("sigma"))
    """
    return join_expansions([expand(store, s, type_map) for s in specs])


def gather_draws(
    store: ParameterStore,
    *specs: VariableSpec,
    type_map: TypeMap | None = None,
) -> pd.DataFrame:
    """Long tidy table with ``.variable`` and ``.value`` columns.

    Each variable is expanded separately and the results are stacked in
    request order. Index columns a variable does not have are left
    missing for its rows.
    """
    if not specs:
        raise ValueError("At least one variable is required")
    parts = []
    for variable_spec in specs:
        expansion = expand(store, variable_spec, type_map)
        part = expansion.frame.rename(columns={expansion.variable: VALUE})
        part.insert(len(DRAW_COLUMNS) + len(expansion.dims), VARIABLE, expansion.variable)
        parts.append(part)

    dims: list[str] = []
    for part in parts:
        dims.extend(c for c in part.columns if c not in (*DRAW_COLUMNS, VARIABLE, VALUE, *dims))
    gathered = pd.concat(parts, ignore_index=True, sort=False)
    gathered = gathered[[*DRAW_COLUMNS, *dims, VARIABLE, VALUE]]
    gathered = validate_tidy_draws(gathered, [*dims, VARIABLE])
    gathered.attrs[INDEX_ATTR] = dims
    return gathered
