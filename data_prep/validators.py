"""
Data quality checks for the mortgage-default dataset before it is modeled.

Catches problems early:
- Missing columns
- Response values outside the current/default level set
- Credit scores outside the 300-850 scale
- Negative debt or employment history
- Heavily imbalanced or single-class response
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import pandas as pd

from core.schema import MORTGAGE_DEFAULT_COLUMNS, MORTGAGE_DEFAULT_LEVELS, MORTGAGE_RESPONSE


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a dataset."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  x {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ! {w}")
        if not lines:
            lines.append("All checks passed.")
        return "\n".join(lines)


def validate_mortgage_dataset(
    frame: pd.DataFrame,
    *,
    columns: Sequence[str] = MORTGAGE_DEFAULT_COLUMNS,
    response: str = MORTGAGE_RESPONSE,
    levels: Sequence[str] = MORTGAGE_DEFAULT_LEVELS,
    min_minority_share: float = 0.01,
) -> ValidationResult:
    """
    Run all validation checks on an in-memory slice of the mortgage data.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Schema checks ---
    missing = [c for c in columns if c not in frame.columns]
    if missing:
        result.errors.append(f"Missing required columns: {missing}")
        return result  # can't continue without columns

    n = len(frame)
    if n == 0:
        result.errors.append("Dataset is empty (0 rows).")
        return result

    # --- Response ---
    y = frame[response].astype("object")
    n_null = int(y.isna().sum())
    if n_null > 0:
        result.errors.append(f"{n_null} rows have null {response}.")
    unknown = sorted({str(v) for v in y.dropna()} - {str(v) for v in levels})
    if unknown:
        result.errors.append(f"{response} has values outside {list(levels)}: {unknown}")
    else:
        counts = y.dropna().astype(str).value_counts()
        if len(counts) < 2:
            result.errors.append(f"{response} has a single class; nothing to model.")
        elif counts.min() / counts.sum() < min_minority_share:
            result.warnings.append(
                f"Minority class of {response} is {counts.min() / counts.sum():.2%} of rows."
            )

    # --- Credit score ---
    if "creditScore" in frame.columns:
        score = pd.to_numeric(frame["creditScore"], errors="coerce")
        n_out = int(((score < 300) | (score > 850)).sum())
        n_bad = int(score.isna().sum())
        if n_out > 0:
            result.warnings.append(f"{n_out} rows have creditScore outside 300-850.")
        if n_bad > 0:
            result.warnings.append(f"{n_bad} rows have null/unparseable creditScore.")

    # --- Non-negative drivers ---
    for col in ["houseAge", "yearsEmploy", "ccDebt"]:
        if col in frame.columns:
            vals = pd.to_numeric(frame[col], errors="coerce")
            n_neg = int((vals < 0).sum())
            n_bad = int(vals.isna().sum())
            if n_neg > 0:
                result.errors.append(f"{n_neg} rows have negative {col}.")
            if n_bad > 0:
                result.warnings.append(f"{n_bad} rows have null/unparseable {col}.")

    # --- Year ---
    if "year" in frame.columns:
        year = pd.to_numeric(frame["year"], errors="coerce")
        n_odd = int(((year < 1900) | (year > 2100)).sum())
        if n_odd > 0:
            result.warnings.append(f"{n_odd} rows have an implausible year.")

    return result
