"""Test configuration for the mortgage-default modeling package."""

from pathlib import Path
import sys

import matplotlib
import numpy as np
import pandas as pd
import pytest


matplotlib.use("Agg")

# Ensure the local packages are importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture(scope="session")
def mortgage_frame() -> pd.DataFrame:
    """2,000 simulated mortgages (default is a current/default factor)."""
    from data_prep.simulate import simulate_mortgage_defaults

    return simulate_mortgage_defaults(2000, seed=11)


@pytest.fixture
def mortgage_parquet(tmp_path, mortgage_frame):
    from core.schema import MORTGAGE_DEFAULT_LEVELS
    from data_prep.dataset import write_frame

    return write_frame(
        mortgage_frame,
        tmp_path / "mortgage.parquet",
        categorical={"default": MORTGAGE_DEFAULT_LEVELS},
        block_size=500,
    )


@pytest.fixture
def mortgage_csv(tmp_path, mortgage_frame):
    from core.schema import MORTGAGE_DEFAULT_LEVELS
    from data_prep.dataset import write_frame

    return write_frame(
        mortgage_frame,
        tmp_path / "mortgage.csv",
        categorical={"default": MORTGAGE_DEFAULT_LEVELS},
        block_size=500,
    )


@pytest.fixture
def id_frame() -> pd.DataFrame:
    """1,000 rows with a unique id, for checking which rows land where."""
    rng = np.random.default_rng(0)
    return pd.DataFrame({
        "row_id": np.arange(1000),
        "x": rng.normal(size=1000),
        "label": rng.choice(["a", "b"], size=1000),
    })


@pytest.fixture
def id_parquet(tmp_path, id_frame):
    from data_prep.dataset import write_frame

    return write_frame(id_frame, tmp_path / "rows.parquet", block_size=128)
