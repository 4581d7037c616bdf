"""
Scorer — applies a FittedModel to a dataset and writes predictions.

Scoring streams the input in blocks, so the scored file can be larger than
memory. The input may be stored differently from the training data (csv vs
parquet); only the schema has to be compatible.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from core.config import ScoreOptions
from core.errors import ConfigurationError, DataError
from core.log import log_timing
from core.schema import ColumnType
from core.utils import require_columns
from data_prep.dataset import DatasetHandle, DatasetWriter
from models.base import FittedModel
from models.design import complete_rows, design_matrix


def resolve_prediction_names(model: FittedModel, names: Optional[Sequence[str]] = None) -> Tuple[str, ...]:
    expected = model.default_prediction_names()
    if names is None:
        return expected
    names = tuple(names)
    if len(names) != len(expected):
        raise ConfigurationError(
            f"{model.algorithm.value} {model.task} model produces {len(expected)} prediction "
            f"column(s) {list(expected)}, got {len(names)} names: {list(names)}"
        )
    if len(set(names)) != len(names):
        raise ConfigurationError(f"Duplicate prediction column names: {list(names)}")
    return names


def check_compatible(model: FittedModel, schema) -> None:
    """Raise DataError unless ``schema`` has every feature with a usable type."""
    require_columns(schema, model.features, what="scoring dataset")
    for c in model.features:
        trained, given = model.schema[c], schema[c]
        if trained.ctype is ColumnType.NUMERIC and given.ctype is not ColumnType.NUMERIC:
            raise DataError(f"Feature {c!r} was numeric in training but is {given.ctype.value} here")


def predict_frame(
    model: FittedModel,
    frame: pd.DataFrame,
    prediction_column_names: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Predict for an in-memory frame.

    Returns a frame aligned with ``frame.index`` holding only the prediction
    columns. Rows with a missing feature value get NaN predictions.
    """
    names = resolve_prediction_names(model, prediction_column_names)
    require_columns(frame, model.features, what="frame to score")

    out = pd.DataFrame(np.nan, index=frame.index, columns=list(names), dtype=float)
    mask = complete_rows(frame, model.features)
    if not mask.any():
        return out

    X = design_matrix(frame.loc[mask], model.features, model.feature_levels)
    if model.is_classifier:
        proba = np.clip(np.asarray(model.estimator.predict_proba(X), dtype=float), 0.0, 1.0)
        totals = proba.sum(axis=1, keepdims=True)
        proba = np.divide(proba, totals, out=np.full_like(proba, np.nan), where=totals > 0)
        out.loc[mask, list(names)] = proba
    else:
        out.loc[mask, names[0]] = np.asarray(model.estimator.predict(X), dtype=float)
    return out


def _output_columns(
    dataset: DatasetHandle,
    write_input_columns: bool,
    extra_columns_to_copy: Sequence[str],
) -> List[str]:
    if write_input_columns:
        return dataset.columns
    require_columns(dataset.schema, extra_columns_to_copy, what=f"scoring dataset {dataset.path.name}")
    wanted = set(extra_columns_to_copy)
    return [c for c in dataset.columns if c in wanted]


@log_timing("score")
def score(
    model: FittedModel,
    dataset: DatasetHandle,
    output: str | Path,
    *,
    options: Optional[ScoreOptions] = None,
    write_input_columns: bool = False,
    extra_columns_to_copy: Sequence[str] = (),
    prediction_column_names: Optional[Sequence[str]] = None,
    fmt: Optional[str] = None,
) -> DatasetHandle:
    """
    Score ``dataset`` with ``model`` and write the result to ``output``.

    Parameters
    ----------
    options : ScoreOptions, optional
        Bundled form of the three keyword options below; wins when given.
    write_input_columns : bool
        Copy every input column into the output.
    extra_columns_to_copy : sequence of str
        Copy just these input columns (e.g. the actual label for evaluation).
    prediction_column_names : sequence of str, optional
        One name per prediction column: one for regression, one per class
        (in ``model.classes`` order) for classification.
    fmt : str, optional
        Output format; inferred from the ``output`` suffix when omitted.

    The output is staged and swapped in on success, so ``output`` may be the
    input file itself.
    """
    if options is not None:
        write_input_columns = options.write_input_columns
        extra_columns_to_copy = options.extra_columns_to_copy
        prediction_column_names = options.prediction_column_names

    # all validation happens before the first prediction
    schema = dataset.schema
    check_compatible(model, schema)
    names = resolve_prediction_names(model, prediction_column_names)
    copied = _output_columns(dataset, write_input_columns, extra_columns_to_copy)
    clash = sorted(set(copied) & set(names))
    if clash:
        raise ConfigurationError(f"Prediction columns would overwrite input columns: {clash}")

    read_cols = copied + [c for c in model.features if c not in copied]
    categorical = {c: levels for c, levels in dataset.categorical.items() if c in copied}
    template = pd.DataFrame(columns=copied + list(names))

    logger.info("Scoring {} with {} -> {}", dataset.path.name, model.describe(), output)
    with DatasetWriter(output, fmt=fmt, categorical=categorical, block_size=dataset.block_size) as w:
        for block in dataset.iter_blocks(read_cols):
            preds = predict_frame(model, block, names)
            w.write(pd.concat([block.loc[:, copied], preds], axis=1))
        if w.template is None:
            w.template = template

    logger.info("Scored {} rows into {}", w.rows_written, w.handle.path)
    return w.handle
