"""Reshape raw sampler output into tidy long-format draws.

Key capabilities:
- ParameterStore: read-only view over sample arrays with draw identity
- recover_types: level sets for integer index dimensions
- expand_variable: one variable to long-format rows
- spread_draws / gather_draws: several variables joined on shared indices

Usage:
    >>> from tidydraws.draws import ParameterStore, recover_types, spec, spread_draws
    >>> store = ParameterStore.from_inference_data(idata)
    >>> tidy = spread_draws(store, spec("b", "group"), type_map=recover_types(data))
"""

from .expand import Expansion, VariableSpec, expand, expand_variable, spec
from .join import gather_draws, join_expansions, spread_draws
from .recovery import LevelSet, TypeMap, recover_types
from .store import CHAIN, DRAW, DRAW_COLUMNS, ITERATION, ParameterStore, Variable

__all__ = [
    # store
    "CHAIN",
    "DRAW",
    "DRAW_COLUMNS",
    "ITERATION",
    "ParameterStore",
    "Variable",
    # recovery
    "LevelSet",
    "TypeMap",
    "recover_types",
    # expand
    "Expansion",
    "VariableSpec",
    "expand",
    "expand_variable",
    "spec",
    # join
    "gather_draws",
    "join_expansions",
    "spread_draws",
]
