"""
Model trainer — formula + training dataset + algorithm tag -> FittedModel.

The trainer checks that the formula fits the dataset and that the response
type suits the algorithm, then hands a design matrix to the chosen
``Trainable``. Algorithm options are validated by the algorithm itself.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import pandas as pd
from loguru import logger
from sklearn.utils.multiclass import type_of_target

from core.errors import DataError
from core.log import log_timing
from core.schema import Column, ColumnType
from core.utils import require_columns
from data_prep.dataset import DatasetHandle
from data_prep.formula import Formula
from models.base import CLASSIFICATION, Algorithm, FittedModel
from models.design import complete_rows, design_matrix, level_text, observed_levels
from models.registry import get_trainable


def _feature_schema(schema: Dict[str, Column], frame: pd.DataFrame, formula: Formula) -> Dict[str, Column]:
    """Snapshot of the formula columns; non-numeric features get their level set fixed here."""
    out: Dict[str, Column] = {}
    for c in formula.columns:
        col = schema[c]
        if c != formula.response and col.ctype is not ColumnType.NUMERIC:
            levels = col.levels or observed_levels(frame[c])
            col = Column(c, ColumnType.CATEGORICAL, tuple(levels))
        out[c] = col
    return out


def _response_values(frame: pd.DataFrame, column: Column, task: str) -> pd.Series:
    y = frame[column.name]
    if task != CLASSIFICATION:
        return pd.to_numeric(y, errors="raise").astype(float)
    if column.ctype is ColumnType.NUMERIC:
        return y
    return level_text(y)


@log_timing("train")
def train(
    formula: Formula,
    dataset: DatasetHandle,
    algorithm: Algorithm | str = Algorithm.LOGISTIC,
    options: Optional[Mapping[str, Any]] = None,
) -> FittedModel:
    """
    Fit ``algorithm`` on ``dataset`` using the columns named by ``formula``.

    Rows with a missing value in any formula column are left out of the fit.

    Raises
    ------
    ConfigurationError
        Unknown algorithm or options it does not accept.
    DataError
        Formula columns missing from the dataset, a response type the
        algorithm cannot model, or fewer than two response classes for a
        classifier.
    """
    strategy = get_trainable(algorithm)
    opts = strategy.parse_options(options)

    schema = dataset.schema
    require_columns(schema, formula.columns, what=f"training dataset {dataset.path.name}")
    task = strategy.resolve_task(schema[formula.response], opts)

    frame = dataset.read(formula.columns)
    mask = complete_rows(frame, formula.columns)
    frame = frame.loc[mask].reset_index(drop=True)
    if frame.empty:
        raise DataError(f"No complete rows for {formula} in {dataset.path.name}")
    n_dropped = int((~mask).sum())
    if n_dropped:
        logger.warning("Dropped {} rows with missing values before training", n_dropped)

    model_schema = _feature_schema(schema, frame, formula)
    levels = {
        c: model_schema[c].levels
        for c in formula.features
        if model_schema[c].ctype is not ColumnType.NUMERIC
    }
    X = design_matrix(frame, formula.features, levels)
    y = _response_values(frame, model_schema[formula.response], task)

    if task == CLASSIFICATION:
        if y.nunique() < 2:
            raise DataError(f"Response {formula.response!r} has a single class in the training data")
        if type_of_target(y) == "continuous":
            raise DataError(
                f"{strategy.algorithm.value} classification needs class labels; "
                f"{formula.response!r} holds continuous values"
            )

    logger.info(
        "Training {} ({}) on {} rows x {} design columns: {}",
        strategy.algorithm.value, task, len(X), X.shape[1], formula,
    )
    estimator = strategy.fit(X, y, task=task, options=opts)

    classes = tuple(getattr(estimator, "classes_", ())) if task == CLASSIFICATION else ()
    classes = tuple(c.item() if hasattr(c, "item") else c for c in classes)

    return FittedModel(
        algorithm=strategy.algorithm,
        task=task,
        formula=formula,
        schema=model_schema,
        estimator=estimator,
        classes=classes,
        n_train_rows=len(X),
        options=opts.model_dump(),
    )
