"""Shared fixtures for unit tests.

Small stores with known values so expected rows can be computed by hand:
- mu: scalar per draw
- group_mean: one value per group (3 groups)
- b: group x term (3 x 2)
"""

import numpy as np
import pandas as pd
import pytest

from tidydraws.draws.recovery import recover_types
from tidydraws.draws.store import ParameterStore

N_DRAWS = 4


@pytest.fixture
def rng():
    """Fixed random number generator for reproducibility."""
    return np.random.default_rng(42)


@pytest.fixture
def store():
    """Store with deterministic values: 4 draws over 2 chains."""
    mu = np.arange(N_DRAWS, dtype=float)
    group_mean = np.arange(N_DRAWS * 3, dtype=float).reshape(N_DRAWS, 3) * 10
    b = np.arange(N_DRAWS * 3 * 2, dtype=float).reshape(N_DRAWS, 3, 2) + 0.5
    return ParameterStore(
        {"mu": mu, "group_mean": group_mean, "b": b},
        chains=[1, 1, 2, 2],
    )


@pytest.fixture
def reference():
    """Reference table with factor columns matching the store's dimensions.

    Group levels are declared in non-alphabetical order on purpose.
    """
    return pd.DataFrame(
        {
            "group": pd.Categorical(["y", "z", "x", "y"], categories=["z", "x", "y"]),
            "term": pd.Categorical(
                ["low", "high", "low", "low"], categories=["low", "high"], ordered=True
            ),
            "response": [1.0, 2.0, 3.0, 4.0],
        }
    )


@pytest.fixture
def type_map(reference):
    return recover_types(reference)
