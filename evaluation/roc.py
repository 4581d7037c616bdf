"""
ROC curves and AUC for scored datasets.

Given the actual label column and one or more predicted-probability columns,
build the (false positive rate, true positive rate, threshold) sequence for
each model so they can be compared on one chart.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import auc as _auc
from sklearn.metrics import roc_curve

from core.errors import DataError
from core.utils import require_columns
from data_prep.dataset import DatasetHandle


@dataclass(frozen=True)
class RocCurve:
    """ROC points ordered by increasing false positive rate."""
    name: str
    fpr: np.ndarray
    tpr: np.ndarray
    thresholds: np.ndarray
    positive: object
    n_positive: int
    n_negative: int

    @property
    def auc(self) -> float:
        return float(_auc(self.fpr, self.tpr))

    def __len__(self) -> int:
        return len(self.fpr)

    def __iter__(self) -> Iterator[Tuple[float, float, float]]:
        for f, t, th in zip(self.fpr, self.tpr, self.thresholds):
            yield float(f), float(t), float(th)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "model": self.name,
            "fpr": self.fpr,
            "tpr": self.tpr,
            "threshold": self.thresholds,
        })


def _load_columns(source: DatasetHandle | pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    if isinstance(source, pd.DataFrame):
        require_columns(source, columns, what="scored frame")
        return source.loc[:, list(columns)]
    require_columns(source.schema, columns, what=f"scored dataset {source.path.name}")
    return source.read(columns)


def _positive_label(actual: pd.Series, positive: Optional[object]) -> object:
    if positive is not None:
        return positive
    if isinstance(actual.dtype, pd.CategoricalDtype):
        return actual.cat.categories[-1]
    values = sorted(actual.dropna().unique())
    if not values:
        raise DataError(f"Actual column {actual.name!r} has no values")
    return values[-1]


def _binary_truth(actual: pd.Series, positive: object) -> np.ndarray:
    observed = actual.dropna()
    if isinstance(actual.dtype, pd.CategoricalDtype):
        observed = observed.astype(object)
    n_distinct = observed.nunique()
    if n_distinct > 2:
        raise DataError(f"ROC needs a binary actual column; {actual.name!r} has {n_distinct} values")
    if pd.api.types.is_numeric_dtype(actual) and not isinstance(positive, str):
        return actual.to_numpy(dtype=float) == float(positive)
    return actual.astype(object).astype(str).to_numpy() == str(positive)


def _curve(name: str, truth: np.ndarray, scores: np.ndarray, positive: object) -> RocCurve:
    n_pos = int(truth.sum())
    n_neg = int(len(truth) - n_pos)
    if n_pos == 0 or n_neg == 0:
        raise DataError(f"ROC for {name!r} needs both classes; got {n_pos} positive and {n_neg} negative rows")
    fpr, tpr, thresholds = roc_curve(truth, scores, drop_intermediate=False)
    return RocCurve(name, fpr, tpr, thresholds, positive, n_pos, n_neg)


def compute_roc_multi(
    actual_column: str,
    predicted_columns: Sequence[str],
    dataset: DatasetHandle | pd.DataFrame,
    *,
    positive: Optional[object] = None,
) -> Dict[str, RocCurve]:
    """
    One RocCurve per predicted column, all against the same actual column.
    Rows with a missing actual or prediction are skipped per curve.
    """
    if not predicted_columns:
        raise DataError("At least one predicted column is required")
    frame = _load_columns(dataset, [actual_column, *predicted_columns])
    actual = frame[actual_column]
    positive = _positive_label(actual, positive)
    truth_all = _binary_truth(actual, positive)

    curves: Dict[str, RocCurve] = {}
    for col in predicted_columns:
        scores = pd.to_numeric(frame[col], errors="coerce").to_numpy(dtype=float)
        keep = actual.notna().to_numpy() & ~np.isnan(scores)
        curves[col] = _curve(col, truth_all[keep], scores[keep], positive)
    return curves


def compute_roc(
    actual_column: str,
    predicted_column: str,
    dataset: DatasetHandle | pd.DataFrame,
    *,
    positive: Optional[object] = None,
) -> RocCurve:
    """
    ROC of one predicted column.

    ``positive`` defaults to the last level of a categorical actual column,
    otherwise to its largest value (1 for a 0/1 column).
    """
    return compute_roc_multi(actual_column, [predicted_column], dataset, positive=positive)[predicted_column]


def roc_table(curves: Dict[str, RocCurve]) -> pd.DataFrame:
    """Long frame (model, fpr, tpr, threshold) for overlaid charts."""
    if not curves:
        return pd.DataFrame(columns=["model", "fpr", "tpr", "threshold"])
    return pd.concat([c.to_frame() for c in curves.values()], ignore_index=True)


def auc_summary(curves: Dict[str, RocCurve]) -> pd.DataFrame:
    rows = [
        {"model": name, "auc": c.auc, "positive": c.n_positive, "negative": c.n_negative}
        for name, c in curves.items()
    ]
    out = pd.DataFrame(rows, columns=["model", "auc", "positive", "negative"])
    return out.sort_values("auc", ascending=False).reset_index(drop=True)
