"""Recover categorical labels for integer index dimensions.

Samplers only see integer indices: a factor ``group`` with levels
``["x", "y", "z"]`` becomes positions 1, 2, 3. A TypeMap records, per
dimension name, the level set those positions stand for, so expanded
draws can carry the original labels again.

Recovery is opportunistic. Dimensions without an entry keep their
numeric index. Dimensions with an entry must stay within the level
count; out-of-range positions raise rather than clamp.

Usage:
    >>> ref = pd.DataFrame({"group": pd.Categorical(["y", "x", "z"], categories=["x", "y", "z"])})
    >>> type_map = recover_types(ref)
    >>> type_map.lookup("group", 2)
    'y'
    >>> type_map.lookup("term", 2)
    2
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Literal

import numpy as np
import pandas as pd
import structlog

from tidydraws.errors import OutOfRangeIndexError

if TYPE_CHECKING:
    import arviz as az

logger = structlog.get_logger(__name__)

__all__ = [
    "LabelKind",
    "LevelSet",
    "TypeMap",
    "recover_types",
]

LabelKind = Literal["ordered", "unordered", "identity"]


@dataclass(frozen=True)
class LevelSet:
    """Ordered level labels for one dimension name.

    Parameters
    ----------
    name : str
        Dimension name the levels apply to.
    levels : tuple
        Labels in declared order; position ``i`` (1-based) maps to
        ``levels[i - 1]``.
    ordered : bool, default False
        Whether the source categorical was ordered.
    """

    name: str
    levels: tuple[Any, ...]
    ordered: bool = False

    @property
    def kind(self) -> LabelKind:
        return "ordered" if self.ordered else "unordered"

    def __len__(self) -> int:
        return len(self.levels)

    def label(self, index: int) -> Any:
        """Label for a single 1-based index."""
        if not 1 <= index <= len(self.levels):
            raise OutOfRangeIndexError(
                f"Index {index} outside levels 1..{len(self.levels)} of '{self.name}'",
                operation="recover_types",
            )
        return self.levels[index - 1]

    def categorical(self, indices: Sequence[int] | np.ndarray) -> pd.Categorical:
        """Vectorised labels as a categorical carrying the full level set."""
        codes = np.asarray(indices, dtype=int)
        if codes.size and (codes.min() < 1 or codes.max() > len(self.levels)):
            bad = codes[(codes < 1) | (codes > len(self.levels))][0]
            raise OutOfRangeIndexError(
                f"Index {bad} outside levels 1..{len(self.levels)} of '{self.name}'",
                operation="recover_types",
            )
        return pd.Categorical.from_codes(
            codes - 1,
            categories=pd.Index(self.levels),
            ordered=self.ordered,
        )

    def labels(self, indices: Sequence[int] | np.ndarray) -> list[Any]:
        return list(self.categorical(indices))


@dataclass(frozen=True)
class TypeMap:
    """Immutable mapping from dimension name to LevelSet.

    Built by recover_types() and threaded explicitly into expansion calls.
    A new recovery produces a new TypeMap; entries are never merged in place.
    """

    entries: Mapping[str, LevelSet] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __contains__(self, dim: object) -> bool:
        return dim in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, dim: str) -> LevelSet | None:
        return self.entries.get(dim)

    def kind(self, dim: str) -> LabelKind:
        entry = self.entries.get(dim)
        return "identity" if entry is None else entry.kind

    def lookup(self, dim: str, index: int) -> Any:
        """Label for ``index`` along ``dim``, or ``index`` itself if unmapped."""
        entry = self.entries.get(dim)
        if entry is None:
            return index
        return entry.label(index)

    def label_column(self, dim: str, indices: np.ndarray) -> pd.Categorical | np.ndarray:
        """Vectorised lookup used by the expander."""
        entry = self.entries.get(dim)
        if entry is None:
            return np.asarray(indices, dtype=int)
        return entry.categorical(indices)

    @classmethod
    def from_coords(cls, idata: "az.InferenceData", group: str = "posterior") -> "TypeMap":
        """Level sets from the non-numeric coordinates of an InferenceData group.

        Coordinates keep their stored order and are treated as unordered.
        Numeric coordinates (including ``chain`` and ``draw``) are skipped.
        """
        dataset = getattr(idata, group)
        entries = {}
        for dim, coord in dataset.coords.items():
            if dim in ("chain", "draw"):
                continue
            values = coord.values
            if values.ndim != 1 or np.issubdtype(values.dtype, np.number):
                continue
            entries[str(dim)] = LevelSet(name=str(dim), levels=tuple(values.tolist()))
        logger.debug("types_from_coords", dims=sorted(entries))
        return cls(entries)


def _categorical_columns(table: Any) -> Iterator[tuple[str, pd.CategoricalDtype]]:
    if isinstance(table, pd.DataFrame):
        items = table.items()
    elif isinstance(table, Mapping):
        items = ((name, pd.Series(values)) for name, values in table.items())
    else:
        raise TypeError(
            f"Reference tables must be DataFrames or mappings, got {type(table).__name__}"
        )
    for name, column in items:
        if isinstance(column.dtype, pd.CategoricalDtype):
            yield str(name), column.dtype


def recover_types(*reference_tables: pd.DataFrame | Mapping[str, Any]) -> TypeMap:
    """Build a TypeMap from the categorical columns of reference tables.

    Parameters
    ----------
    *reference_tables : DataFrame or mapping of column -> values
        Tables whose categorical columns share names with index bindings.
        Non-categorical columns are ignored.

    Returns
    -------
    TypeMap
        One LevelSet per categorical column name, preserving the declared
        category order (not alphabetical) and the ordered flag. When two
        tables carry the same column, the later table wins.
    """
    entries: dict[str, LevelSet] = {}
    for table in reference_tables:
        for name, dtype in _categorical_columns(table):
            if name in entries:
                logger.debug("level_set_replaced", dim=name)
            entries[name] = LevelSet(
                name=name,
                levels=tuple(dtype.categories.tolist()),
                ordered=bool(dtype.ordered),
            )
    logger.debug("types_recovered", dims=sorted(entries))
    return TypeMap(entries)
