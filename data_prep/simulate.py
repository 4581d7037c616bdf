"""
Synthetic mortgage-default data for the teaching workflow.

One row per mortgage:
  creditScore  borrower credit score (clipped to 300-850)
  houseAge     age of the house in years
  yearsEmploy  years with current employer
  ccDebt       outstanding credit-card debt
  year         observation year
  default      "current" / "default"

Default probability is a logistic function of the standardized drivers, so a
logistic model fitted on this data should recover the signs below:
  higher credit score  -> lower PD
  more card debt       -> higher PD
  longer employment    -> lower PD
  older house          -> slightly higher PD
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
from loguru import logger
from scipy.special import expit

from core.config import DEFAULT_BLOCK_SIZE
from core.errors import ConfigurationError
from core.schema import MORTGAGE_DEFAULT_COLUMNS, MORTGAGE_DEFAULT_LEVELS, MORTGAGE_RESPONSE

from .dataset import DatasetHandle, DatasetWriter


@dataclass(frozen=True)
class MortgageSimulationParams:
    credit_score_mean: float = 700.0
    credit_score_std: float = 50.0
    house_age_max: int = 40
    years_employ_max: int = 15
    cc_debt_mean: float = 5000.0
    cc_debt_std: float = 2000.0
    first_year: int = 2000
    n_years: int = 10

    # logistic coefficients on standardized drivers
    base_logit: float = -2.0
    credit_score_coef: float = -1.2
    cc_debt_coef: float = 1.0
    years_employ_coef: float = -0.6
    house_age_coef: float = 0.2


def _simulate_block(n_rows: int, rng: np.random.Generator, p: MortgageSimulationParams) -> pd.DataFrame:
    credit = np.clip(np.round(rng.normal(p.credit_score_mean, p.credit_score_std, n_rows)), 300, 850)
    house_age = rng.integers(0, p.house_age_max + 1, n_rows)
    years_employ = rng.integers(0, p.years_employ_max + 1, n_rows)
    cc_debt = np.maximum(np.round(rng.normal(p.cc_debt_mean, p.cc_debt_std, n_rows)), 0.0)
    year = rng.integers(p.first_year, p.first_year + p.n_years, n_rows)

    logit = (
        p.base_logit
        + p.credit_score_coef * (credit - p.credit_score_mean) / p.credit_score_std
        + p.cc_debt_coef * (cc_debt - p.cc_debt_mean) / p.cc_debt_std
        + p.years_employ_coef * (years_employ - p.years_employ_max / 2) / (p.years_employ_max / 4)
        + p.house_age_coef * (house_age - p.house_age_max / 2) / (p.house_age_max / 4)
    )
    is_default = rng.random(n_rows) < expit(logit)
    labels = np.where(is_default, MORTGAGE_DEFAULT_LEVELS[1], MORTGAGE_DEFAULT_LEVELS[0])

    frame = pd.DataFrame(
        {
            "creditScore": credit.astype(int),
            "houseAge": house_age.astype(int),
            "yearsEmploy": years_employ.astype(int),
            "ccDebt": cc_debt,
            "year": year.astype(int),
            MORTGAGE_RESPONSE: pd.Categorical(labels, categories=list(MORTGAGE_DEFAULT_LEVELS)),
        }
    )
    return frame.loc[:, list(MORTGAGE_DEFAULT_COLUMNS)]


def simulate_mortgage_defaults(
    n_rows: int,
    seed: Optional[int] = 42,
    *,
    params: MortgageSimulationParams = MortgageSimulationParams(),
) -> pd.DataFrame:
    """Return ``n_rows`` simulated mortgages as one in-memory frame."""
    if n_rows < 0:
        raise ConfigurationError(f"n_rows must be >= 0, got {n_rows}")
    rng = np.random.default_rng(seed)
    return _simulate_block(n_rows, rng, params)


def write_mortgage_dataset(
    path: str | Path,
    n_rows: int,
    seed: Optional[int] = 42,
    *,
    block_size: int = DEFAULT_BLOCK_SIZE,
    params: MortgageSimulationParams = MortgageSimulationParams(),
) -> DatasetHandle:
    """
    Generate and write the dataset block by block, so files larger than memory can be produced.

    The returned handle declares ``default`` as a factor with levels current/default.
    """
    if n_rows < 0:
        raise ConfigurationError(f"n_rows must be >= 0, got {n_rows}")
    rng = np.random.default_rng(seed)
    categorical = {MORTGAGE_RESPONSE: MORTGAGE_DEFAULT_LEVELS}

    with DatasetWriter(path, template=_simulate_block(0, rng, params),
                       categorical=categorical, block_size=block_size) as w:
        remaining = n_rows
        while remaining > 0:
            n = min(block_size, remaining)
            w.write(_simulate_block(n, rng, params))
            remaining -= n

    logger.info("Simulated {} mortgages into {}", n_rows, path)
    return w.handle
