"""Request objects for driving the engine without writing pipeline code.

A caller describes what it wants as plain data (e.g. parsed from JSON or
YAML) and the run_* functions turn it into tidy tables:

- DrawsRequest: variables and their dimension names -> spread_draws
- SummaryRequest: columns, grouping, estimators -> point_interval
- ComparisonRequest: value, level column, mode -> compare_levels

Usage:
    >>> tidy = run_draws(store, DrawsRequest(variables={"mu": [], "b": ["group"]}), type_map)
    >>> summary = run_summary(tidy, SummaryRequest(value_columns=["b"], group_by=["group"]))
    >>> records(summary)[0][".variable"]
    'b'
"""

from __future__ import annotations

from typing import Any, Literal

import pandas as pd
from pydantic import BaseModel, Field, field_validator, model_validator

from tidydraws.config.schema import EstimationConfig
from tidydraws.draws.expand import VariableSpec
from tidydraws.draws.join import gather_draws, spread_draws
from tidydraws.draws.recovery import TypeMap
from tidydraws.draws.store import ParameterStore
from tidydraws.summary.compare import compare_levels
from tidydraws.summary.estimate import point_interval

__all__ = [
    "ComparisonRequest",
    "DrawsRequest",
    "SummaryRequest",
    "records",
    "run_comparison",
    "run_draws",
    "run_summary",
]


class DrawsRequest(BaseModel):
    variables: dict[str, list[str]]
    layout: Literal["wide", "long"] = "wide"

    @field_validator("variables")
    @classmethod
    def validate_variables(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        if not value:
            raise ValueError("At least one variable is required")
        return value

    def specs(self) -> list[VariableSpec]:
        return [VariableSpec(name=name, dims=tuple(dims)) for name, dims in self.variables.items()]


class SummaryRequest(BaseModel):
    value_columns: list[str] = Field(default_factory=list)
    group_by: list[str] = Field(default_factory=list)
    point: Literal["mean", "median", "mode"] | None = None
    interval: Literal["qi", "hdi"] | None = None
    probs: list[float] | None = None

    @field_validator("probs")
    @classmethod
    def validate_probs(cls, value: list[float] | None) -> list[float] | None:
        if value is not None:
            for prob in value:
                if not 0 < prob <= 1:
                    raise ValueError(f"Probability levels must be in (0, 1], got {prob}")
        return value


class ComparisonRequest(BaseModel):
    value: str
    by: str
    comparison: Literal["pairwise", "control", "ordered"] | list[tuple[Any, Any]] = "pairwise"
    fun: Literal["difference", "ratio"] = "difference"
    reference: Any = None
    group_by: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_reference(self) -> "ComparisonRequest":
        """A reference level only makes sense for control comparisons."""
        if self.reference is not None and self.comparison != "control":
            raise ValueError("reference is only used with comparison='control'")
        return self


def run_draws(
    store: ParameterStore,
    request: DrawsRequest,
    type_map: TypeMap | None = None,
) -> pd.DataFrame:
    if request.layout == "long":
        return gather_draws(store, *request.specs(), type_map=type_map)
    return spread_draws(store, *request.specs(), type_map=type_map)


def run_summary(
    table: pd.DataFrame,
    request: SummaryRequest,
    config: EstimationConfig | None = None,
) -> pd.DataFrame:
    return point_interval(
        table,
        value_columns=request.value_columns or None,
        point=request.point,
        interval=request.interval,
        probs=request.probs,
        group_by=request.group_by,
        config=config,
    )


def run_comparison(table: pd.DataFrame, request: ComparisonRequest) -> pd.DataFrame:
    return compare_levels(
        table,
        value=request.value,
        by=request.by,
        comparison=request.comparison,
        fun=request.fun,
        reference=request.reference,
        group_by=request.group_by,
    )


def records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """Ordered named-field records for export or plotting layers.

    Categorical labels are returned as their plain values.
    """
    return frame.to_dict("records")
