"""Read-only view over raw sampler output.

A ParameterStore maps variable names to sample arrays of shape
``(n_draws, *dims)`` and records which chain and iteration each draw came
from. Draw identity is shared by every variable in the store, which is
what lets later joins keep values from the same draw on the same row.

Constructors cover the usual sources:
- from_flat: flat arrays plus declared dimension sizes
- from_inference_data / from_dataset: ArviZ InferenceData or xarray posterior
- from_draws_frame: a wide draws table with names like ``b[1,2]``

Usage:
    >>> store = ParameterStore.from_flat(
    ...     {"mu": [0.1, 0.2], "b": [1, 2, 3, 4, 5, 6]},
    ...     dims={"mu": (), "b": (3,)},
    ...     n_draws=2,
    ... )
    >>> store.variable("b").shape
    (3,)
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
import structlog
import xarray as xr

from tidydraws.errors import DimensionMismatchError, UnknownVariableError

if TYPE_CHECKING:
    import arviz as az

logger = structlog.get_logger(__name__)

__all__ = [
    "CHAIN",
    "DRAW",
    "DRAW_COLUMNS",
    "ITERATION",
    "ParameterStore",
    "Variable",
]

CHAIN = ".chain"
ITERATION = ".iteration"
DRAW = ".draw"
DRAW_COLUMNS = (CHAIN, ITERATION, DRAW)

_INDEXED_NAME = re.compile(r"^(?P<name>[^\[\]]+)\[(?P<index>[^\[\]]*)\]$")


@dataclass(frozen=True)
class Variable:
    """A named parameter and its samples.

    Attributes:
        name: Parameter name as produced by the sampler.
        samples: Array of shape (n_draws, *dims). Read-only.
    """

    name: str
    samples: np.ndarray

    @property
    def shape(self) -> tuple[int, ...]:
        """Dimension sizes, excluding the leading draw axis."""
        return tuple(self.samples.shape[1:])

    @property
    def ndim(self) -> int:
        return self.samples.ndim - 1

    @property
    def size(self) -> int:
        """Number of index combinations per draw (1 for scalars)."""
        return int(np.prod(self.shape, dtype=int))

    @property
    def n_draws(self) -> int:
        return self.samples.shape[0]


class ParameterStore:
    """Immutable mapping from variable name to Variable.

    Parameters
    ----------
    variables : Mapping[str, array-like]
        Sample arrays with the draw axis first.
    chains : array-like, optional
        1-based chain number of each draw. Defaults to a single chain.
    iterations : array-like, optional
        1-based iteration number of each draw within its chain. Defaults to
        a running count within each chain.

    Raises
    ------
    DimensionMismatchError
        If variables disagree on the number of draws, a dimension has size
        zero, or chain/iteration arrays have the wrong length.
    """

    def __init__(
        self,
        variables: Mapping[str, np.ndarray],
        chains: Sequence[int] | np.ndarray | None = None,
        iterations: Sequence[int] | np.ndarray | None = None,
    ) -> None:
        built: dict[str, Variable] = {}
        n_draws: int | None = None
        for name, values in variables.items():
            samples = np.array(values, copy=True)
            if samples.ndim == 0:
                raise DimensionMismatchError(
                    f"Variable '{name}' has no draw axis", operation="ParameterStore"
                )
            if any(size <= 0 for size in samples.shape[1:]):
                raise DimensionMismatchError(
                    f"Variable '{name}' has an empty dimension: shape {samples.shape[1:]}",
                    operation="ParameterStore",
                )
            if n_draws is None:
                n_draws = samples.shape[0]
            elif samples.shape[0] != n_draws:
                raise DimensionMismatchError(
                    f"Variable '{name}' has {samples.shape[0]} draws, expected {n_draws}",
                    operation="ParameterStore",
                )
            samples.setflags(write=False)
            built[name] = Variable(name=name, samples=samples)

        self._variables = built
        self._n_draws = n_draws or 0
        self._chains = self._identity_array(
            np.ones(self._n_draws, dtype=int) if chains is None else chains
        )
        self._iterations = self._identity_array(
            _running_count(self._chains) if iterations is None else iterations
        )
        self._draws = np.arange(1, self._n_draws + 1)
        self._draws.setflags(write=False)

        logger.debug(
            "parameter_store_built",
            n_variables=len(built),
            n_draws=self._n_draws,
            n_chains=len(np.unique(self._chains)),
        )

    def _identity_array(self, values) -> np.ndarray:
        array = np.asarray(values, dtype=int)
        if array.shape != (self._n_draws,):
            raise DimensionMismatchError(
                f"Draw identity array has shape {array.shape}, expected ({self._n_draws},)",
                operation="ParameterStore",
            )
        array = array.copy()
        array.setflags(write=False)
        return array

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_flat(
        cls,
        values: Mapping[str, Sequence[float] | np.ndarray],
        dims: Mapping[str, Sequence[int]],
        n_draws: int,
        chains: Sequence[int] | None = None,
        iterations: Sequence[int] | None = None,
    ) -> "ParameterStore":
        """Build a store from flat arrays and declared dimension sizes.

        Each flat array has length ``n_draws * prod(dims[name])`` and is laid
        out row-major with the draw index leading, so element
        ``(draw, i, j)`` sits at ``draw * d1 * d2 + i * d2 + j``.
        """
        shaped = {}
        for name, flat in values.items():
            shape = tuple(int(d) for d in dims.get(name, ()))
            flat = np.asarray(flat)
            expected = n_draws * int(np.prod(shape, dtype=int))
            if flat.ndim != 1 or flat.size != expected:
                raise DimensionMismatchError(
                    f"Variable '{name}' has {flat.size} values, expected "
                    f"{n_draws} draws x {shape} = {expected}",
                    operation="from_flat",
                )
            shaped[name] = flat.reshape((n_draws, *shape))
        return cls(shaped, chains=chains, iterations=iterations)

    @classmethod
    def from_inference_data(
        cls,
        idata: "az.InferenceData",
        group: str = "posterior",
        var_names: Sequence[str] | None = None,
    ) -> "ParameterStore":
        """Build a store from an ArviZ InferenceData group.

        Chains are concatenated in chain order, so ``.draw`` runs through
        chain 1 first, then chain 2, and so on.
        """
        if group not in idata.groups():
            raise ValueError(f"InferenceData has no '{group}' group")
        return cls.from_dataset(getattr(idata, group), var_names=var_names)

    @classmethod
    def from_dataset(
        cls,
        dataset: xr.Dataset,
        var_names: Sequence[str] | None = None,
    ) -> "ParameterStore":
        """Build a store from an xarray Dataset with ``chain`` and ``draw`` dims."""
        if not isinstance(dataset, xr.Dataset):
            raise TypeError(f"Expected an xarray Dataset, got {type(dataset).__name__}")
        missing_dims = [dim for dim in ("chain", "draw") if dim not in dataset.dims]
        if missing_dims:
            raise DimensionMismatchError(
                f"Dataset lacks sample dimension(s) {missing_dims}", operation="from_dataset"
            )
        names = list(var_names) if var_names is not None else list(dataset.data_vars)

        n_chains = dataset.sizes["chain"]
        n_iter = dataset.sizes["draw"]
        variables = {}
        for name in names:
            if name not in dataset.data_vars:
                raise UnknownVariableError(
                    f"Variable '{name}' not in dataset", operation="from_dataset"
                )
            data = dataset[name].transpose("chain", "draw", ...).values
            variables[name] = data.reshape((n_chains * n_iter, *data.shape[2:]))

        chains = np.repeat(np.arange(1, n_chains + 1), n_iter)
        iterations = np.tile(np.arange(1, n_iter + 1), n_chains)
        return cls(variables, chains=chains, iterations=iterations)

    @classmethod
    def from_draws_frame(cls, frame: pd.DataFrame) -> "ParameterStore":
        """Build a store from a wide draws table with raw sampler names.

        Columns named like ``b[1,2]`` are grouped under ``b`` with 1-based
        indices. The raw names are parsed here, once; queries afterwards
        address variables by name and dimension position only. Columns
        ``.chain`` and ``.iteration`` are used as draw identity when present.
        Other columns starting with a dot or ending in ``__`` (sampler
        diagnostics) are ignored.
        """
        cells: dict[str, dict[tuple[int, ...], str]] = {}
        for column in frame.columns:
            column = str(column)
            if column.startswith(".") or column.endswith("__"):
                continue
            match = _INDEXED_NAME.match(column)
            if match is None:
                cells.setdefault(column, {})[()] = column
                continue
            try:
                index = tuple(int(part) for part in match["index"].split(",") if part.strip())
            except ValueError:
                raise DimensionMismatchError(
                    f"Column '{column}' has a non-integer index",
                    operation="from_draws_frame",
                ) from None
            cells.setdefault(match["name"], {})[index] = column

        variables = {}
        n_draws = len(frame)
        for name, by_index in cells.items():
            ranks = {len(index) for index in by_index}
            if len(ranks) != 1:
                raise DimensionMismatchError(
                    f"Variable '{name}' mixes index ranks {sorted(ranks)}",
                    operation="from_draws_frame",
                )
            shape = tuple(max(index[axis] for index in by_index) for axis in range(ranks.pop()))
            expected = int(np.prod(shape, dtype=int))
            if len(by_index) != expected or any(min(index, default=1) < 1 for index in by_index):
                raise DimensionMismatchError(
                    f"Variable '{name}' has {len(by_index)} cells, expected a full {shape} grid",
                    operation="from_draws_frame",
                )
            samples = np.empty((n_draws, *shape), dtype=float)
            for index, column in by_index.items():
                samples[(slice(None), *(i - 1 for i in index))] = frame[column].to_numpy()
            variables[name] = samples

        chains = frame[CHAIN].to_numpy() if CHAIN in frame.columns else None
        iterations = frame[ITERATION].to_numpy() if ITERATION in frame.columns else None
        return cls(variables, chains=chains, iterations=iterations)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def variable(self, name: str) -> Variable:
        """Return the named variable.

        Raises
        ------
        UnknownVariableError
            If the store has no variable called ``name``.
        """
        try:
            return self._variables[name]
        except KeyError:
            raise UnknownVariableError(
                f"Unknown variable '{name}'. Available: {sorted(self._variables)}",
                operation="ParameterStore",
            ) from None

    @property
    def names(self) -> list[str]:
        return list(self._variables)

    @property
    def n_draws(self) -> int:
        return self._n_draws

    @property
    def chains(self) -> np.ndarray:
        return self._chains

    @property
    def iterations(self) -> np.ndarray:
        return self._iterations

    @property
    def draws(self) -> np.ndarray:
        return self._draws

    def draw_identity(self) -> pd.DataFrame:
        """One row per draw with the ``.chain``, ``.iteration``, ``.draw`` columns."""
        return pd.DataFrame(
            {CHAIN: self._chains, ITERATION: self._iterations, DRAW: self._draws}
        )

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        shapes = ", ".join(f"{v.name}{list(v.shape)}" for v in self._variables.values())
        return f"ParameterStore(n_draws={self._n_draws}, variables=[{shapes}])"


def _running_count(chains: np.ndarray) -> np.ndarray:
    """1-based position of each draw within its chain."""
    counts: dict[int, int] = {}
    out = np.empty(len(chains), dtype=int)
    for i, chain in enumerate(chains):
        counts[chain] = counts.get(chain, 0) + 1
        out[i] = counts[chain]
    return out
