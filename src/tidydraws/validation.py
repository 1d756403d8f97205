"""Schema validation for tidy draws and estimate tables."""

from collections.abc import Sequence

import pandas as pd
import pandera.pandas as pa

from tidydraws.draws.store import CHAIN, DRAW, ITERATION

# Draw identity columns are 1-based integers
TidyDrawsSchema = pa.DataFrameSchema(
    {
        CHAIN: pa.Column(int, pa.Check.ge(1), nullable=False),
        ITERATION: pa.Column(int, pa.Check.ge(1), nullable=False),
        DRAW: pa.Column(int, pa.Check.ge(1), nullable=False),
    },
    strict=False,  # index and value columns vary per request
    coerce=True,
)


EstimateSchema = pa.DataFrameSchema(
    {
        ".variable": pa.Column(str, nullable=False),
        ".value": pa.Column(nullable=False),
        ".lower": pa.Column(float, nullable=False),
        ".upper": pa.Column(float, nullable=False),
        ".width": pa.Column(float, pa.Check.in_range(0, 1, include_min=False), nullable=False),
        ".point": pa.Column(str, pa.Check.isin(["mean", "median", "mode"])),
        ".interval": pa.Column(str, pa.Check.isin(["qi", "hdi"])),
    },
    checks=[
        pa.Check(
            lambda df: df[".lower"] <= df[".upper"],
            error="interval lower bound exceeds upper bound",
        ),
    ],
    strict=False,  # grouping columns vary per request
)


def validate_tidy_draws(df: pd.DataFrame, index_columns: Sequence[str] = ()) -> pd.DataFrame:
    """
    Validate draw identity columns and index uniqueness per draw.

    Args:
        df: Tidy draws table (e.g. from spread_draws)
        index_columns: Index columns that together with ``.draw`` must be unique

    Returns:
        Validated DataFrame

    Raises:
        pa.errors.SchemaError: If a column fails its checks or an index
            combination repeats within a draw
    """
    schema = pa.DataFrameSchema(
        TidyDrawsSchema.columns,
        unique=[DRAW, *index_columns],
        strict=False,
        coerce=True,
    )
    return schema.validate(df)


def validate_estimates(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate a point_interval() result against EstimateSchema.

    Raises:
        pa.errors.SchemaError: If bounds are inverted or labels are unknown
    """
    return EstimateSchema.validate(df)
