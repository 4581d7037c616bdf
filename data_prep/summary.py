"""
Streaming per-column summary of a dataset (count, missing, mean, std, min, max,
level counts for factors). One pass over the blocks; nothing is held beyond
running totals.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from core.schema import ColumnType

from .dataset import DatasetHandle


def _merge_moments(n_a: int, mean_a: float, m2_a: float, v: np.ndarray) -> tuple[int, float, float]:
    """Fold a block into running (count, mean, M2) with the pairwise update of Chan et al."""
    n_b = len(v)
    mean_b = float(v.mean())
    m2_b = float(np.square(v - mean_b).sum())
    n = n_a + n_b
    delta = mean_b - mean_a
    mean = mean_a + delta * n_b / n
    m2 = m2_a + m2_b + delta * delta * n_a * n_b / n
    return n, mean, m2


def summarize_dataset(dataset: DatasetHandle, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Returns
    -------
    DataFrame with one row per column:
        column, type, count, missing, mean, std, min, max, levels
    ``std`` is the population standard deviation (ddof=0).
    ``levels`` holds a {level: count} dict for categorical/string columns.
    """
    schema = dataset.schema
    names = list(columns) if columns is not None else list(schema)

    n_obs: Dict[str, int] = {c: 0 for c in names}
    n_missing: Dict[str, int] = {c: 0 for c in names}
    means: Dict[str, float] = {c: 0.0 for c in names}
    m2s: Dict[str, float] = {c: 0.0 for c in names}
    mins: Dict[str, float] = {c: np.inf for c in names}
    maxs: Dict[str, float] = {c: -np.inf for c in names}
    level_counts: Dict[str, pd.Series] = {}

    for block in dataset.iter_blocks(names):
        for c in names:
            s = block[c]
            valid = s.dropna()
            n_missing[c] += len(s) - len(valid)
            if schema[c].ctype is ColumnType.NUMERIC:
                v = valid.to_numpy(dtype=float)
                if len(v):
                    n_obs[c], means[c], m2s[c] = _merge_moments(n_obs[c], means[c], m2s[c], v)
                    mins[c] = min(mins[c], float(v.min()))
                    maxs[c] = max(maxs[c], float(v.max()))
            else:
                n_obs[c] += len(valid)
                counts = valid.astype(str).value_counts()
                prev = level_counts.get(c)
                level_counts[c] = counts if prev is None else prev.add(counts, fill_value=0)

    rows = []
    for c in names:
        col = schema[c]
        row = {"column": c, "type": col.ctype.value, "count": n_obs[c], "missing": n_missing[c]}
        if col.ctype is ColumnType.NUMERIC and n_obs[c] > 0:
            std = float(np.sqrt(m2s[c] / n_obs[c]))
            row.update({"mean": means[c], "std": std, "min": mins[c], "max": maxs[c]})
        else:
            row.update({"mean": np.nan, "std": np.nan, "min": np.nan, "max": np.nan})
        counts = level_counts.get(c)
        row["levels"] = {str(k): int(v) for k, v in counts.items()} if counts is not None else None
        rows.append(row)
    return pd.DataFrame(rows)
