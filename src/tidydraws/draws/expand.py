"""Expand one indexed variable into long-format rows.

A variable ``b`` with shape (3, 2) and S draws expands to S x 3 x 2 rows,
one per draw per index combination. The caller names the dimensions
left to right with a VariableSpec; each name becomes an index column.

Usage:
    >>> frame = expand_variable(store, spec("b", "group", "term"))
    >>> frame.columns.tolist()
    ['.chain', '.iteration', '.draw', 'group', 'term', 'b']
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import structlog

from tidydraws.draws.recovery import TypeMap
from tidydraws.draws.store import CHAIN, DRAW, DRAW_COLUMNS, ITERATION, ParameterStore
from tidydraws.errors import DimensionMismatchError

logger = structlog.get_logger(__name__)

__all__ = [
    "Expansion",
    "VariableSpec",
    "expand",
    "expand_variable",
    "fallback_dim_name",
    "spec",
]


@dataclass(frozen=True)
class VariableSpec:
    """A requested variable and the names bound to its dimensions.

    Attributes:
        name: Variable name in the store.
        dims: Dimension names, left to right. May be shorter than the
            variable's dimensionality; trailing dimensions then get
            fallback names.
    """

    name: str
    dims: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "dims", tuple(self.dims))


def spec(name: str, *dims: str) -> VariableSpec:
    """Shorthand for ``VariableSpec(name, dims)``."""
    return VariableSpec(name=name, dims=dims)


@dataclass(frozen=True)
class Expansion:
    """Long-format expansion of one variable.

    Attributes:
        variable: Name of the value column.
        dim_sizes: Index column name -> dimension size, in column order.
        frame: DataFrame with draw identity, index and value columns.
    """

    variable: str
    dim_sizes: dict[str, int] = field(default_factory=dict)
    frame: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def dims(self) -> list[str]:
        return list(self.dim_sizes)


def fallback_dim_name(variable: str, axis: int) -> str:
    """Column name for an unbound dimension (0-based axis), ArviZ style."""
    return f"{variable}_dim_{axis}"


def _resolve_dim_names(variable: str, shape: tuple[int, ...], dims: tuple[str, ...]) -> list[str]:
    if len(dims) > len(shape):
        raise DimensionMismatchError(
            f"'{variable}' has {len(shape)} dimension(s) but {len(dims)} names were given: "
            f"{list(dims)}",
            operation="expand",
        )
    names = list(dims) + [fallback_dim_name(variable, axis) for axis in range(len(dims), len(shape))]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise DimensionMismatchError(
            f"'{variable}' binds {duplicates} to more than one dimension", operation="expand"
        )
    reserved = set(DRAW_COLUMNS) | {variable}
    clashes = sorted(reserved.intersection(names))
    if clashes:
        raise DimensionMismatchError(
            f"'{variable}' uses reserved column name(s) {clashes} as dimension names",
            operation="expand",
        )
    return names


def expand(
    store: ParameterStore,
    variable_spec: VariableSpec,
    type_map: TypeMap | None = None,
) -> Expansion:
    """Expand a variable and keep its dimension sizes for joining.

    Parameters
    ----------
    store : ParameterStore
        Source of samples.
    variable_spec : VariableSpec
        Variable name and dimension bindings.
    type_map : TypeMap, optional
        Level sets used to label index columns whose names it maps.

    Returns
    -------
    Expansion
        Rows ordered by draw, then by index tuple (last index fastest).

    Raises
    ------
    UnknownVariableError
        If the variable is not in the store.
    DimensionMismatchError
        If more names than dimensions are given or names repeat.
    OutOfRangeIndexError
        If a mapped dimension is larger than its level set.
    """
    type_map = type_map if type_map is not None else TypeMap()
    variable = store.variable(variable_spec.name)
    shape = variable.shape
    names = _resolve_dim_names(variable.name, shape, variable_spec.dims)

    n_draws = variable.n_draws
    cells = variable.size
    grid = np.array(
        list(itertools.product(*(range(1, size + 1) for size in shape))), dtype=int
    ).reshape(cells, len(shape))

    columns: dict[str, object] = {
        CHAIN: np.repeat(store.chains, cells),
        ITERATION: np.repeat(store.iterations, cells),
        DRAW: np.repeat(store.draws, cells),
    }
    for axis, dim in enumerate(names):
        columns[dim] = type_map.label_column(dim, np.tile(grid[:, axis], n_draws))
    columns[variable.name] = variable.samples.reshape(n_draws * cells)

    frame = pd.DataFrame(columns)
    logger.debug(
        "variable_expanded",
        variable=variable.name,
        dims=names,
        shape=list(shape),
        rows=len(frame),
        recovered=[dim for dim in names if dim in type_map],
    )
    return Expansion(
        variable=variable.name,
        dim_sizes=dict(zip(names, shape)),
        frame=frame,
    )


def expand_variable(
    store: ParameterStore,
    variable_spec: VariableSpec,
    type_map: TypeMap | None = None,
) -> pd.DataFrame:
    """Long-format rows for one variable. See expand() for details."""
    return expand(store, variable_spec, type_map).frame
