"""
Design matrices: numeric features pass through, factor features are one-hot
encoded against the level set recorded at training time. The same layout is
rebuilt at scoring time, whatever the scoring file's storage format.
"""

from __future__ import annotations

from typing import Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from data_prep.dataset import as_level_text


def level_text(values: pd.Series) -> pd.Series:
    """Factor values as strings (NaN stays NaN), independent of the source dtype."""
    if isinstance(values.dtype, pd.CategoricalDtype):
        values = values.astype(object)
    return values.map(as_level_text).astype(object)


def observed_levels(values: pd.Series) -> Tuple[str, ...]:
    if isinstance(values.dtype, pd.CategoricalDtype):
        return tuple(str(c) for c in values.cat.categories)
    return tuple(sorted(level_text(values).dropna().unique()))


def complete_rows(frame: pd.DataFrame, columns: Sequence[str]) -> np.ndarray:
    """Boolean mask of rows with no missing value in ``columns``."""
    return frame.loc[:, list(columns)].notna().all(axis=1).to_numpy()


def design_matrix(
    frame: pd.DataFrame,
    features: Sequence[str],
    levels: Mapping[str, Sequence[str]],
) -> pd.DataFrame:
    parts = []
    for c in features:
        if c in levels:
            cat = pd.Categorical(level_text(frame[c]), categories=list(levels[c]))
            dummies = pd.get_dummies(cat, prefix=c, prefix_sep="=", dtype=float)
            dummies.index = frame.index
            parts.append(dummies)
        else:
            parts.append(pd.to_numeric(frame[c], errors="coerce").astype(float).rename(c))
    if not parts:
        return pd.DataFrame(index=frame.index)
    return pd.concat(parts, axis=1)
