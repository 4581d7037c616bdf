"""
Base classes for fitting strategies and the fitted-model artifact.

Every algorithm is a ``Trainable``: it validates its own options (pydantic
model, unknown keys rejected) and turns a design matrix plus response into a
fitted scikit-learn estimator. The trainer and scorer only ever talk to this
interface, so adding an algorithm means adding one subclass and one registry
entry.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Type

import joblib
import pandas as pd
from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError

from core.errors import ConfigurationError, DataError, DatasetIOError
from core.schema import Column, ColumnType
from data_prep.formula import Formula

REGRESSION = "regression"
CLASSIFICATION = "classification"


class Algorithm(str, Enum):
    LINEAR = "linear"
    LOGISTIC = "logistic"
    DECISION_TREE = "decision_tree"
    RANDOM_FOREST = "random_forest"
    GRADIENT_BOOSTING = "gradient_boosting"


class AlgorithmOptions(BaseModel):
    """Base for per-algorithm options. Unknown keys are a configuration error."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class Trainable:
    """Interface for a fitting strategy."""

    algorithm: ClassVar[Algorithm]
    Options: ClassVar[Type[AlgorithmOptions]] = AlgorithmOptions

    # fixed task, or None when it follows the response type / "task" option
    task: ClassVar[Optional[str]] = None

    def parse_options(self, options: Optional[Mapping[str, Any]]) -> AlgorithmOptions:
        try:
            return self.Options.model_validate(dict(options or {}))
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid options for {self.algorithm.value}: {exc}") from exc

    def resolve_task(self, response: Column, options: AlgorithmOptions) -> str:
        """Pick regression/classification and reject incompatible response types."""
        task = self.task or getattr(options, "task", None)
        if task is None:
            task = REGRESSION if response.ctype is ColumnType.NUMERIC else CLASSIFICATION
        if task == REGRESSION and response.ctype is not ColumnType.NUMERIC:
            raise DataError(
                f"{self.algorithm.value} regression needs a numeric response; "
                f"{response.name!r} is {response.ctype.value}"
            )
        return task

    def build_estimator(self, task: str, options: AlgorithmOptions):
        raise NotImplementedError

    def fit(self, X: pd.DataFrame, y: pd.Series, *, task: str, options: AlgorithmOptions):
        estimator = self.build_estimator(task, options)
        estimator.fit(X, y)
        return estimator


@dataclass(frozen=True)
class FittedModel:
    """
    Output of training. Read-only; score it against any dataset whose schema
    contains the feature columns.
    """

    algorithm: Algorithm
    task: str
    formula: Formula
    schema: Dict[str, Column]  # response + features as seen in training
    estimator: Any
    classes: Tuple[Any, ...] = ()
    n_train_rows: int = 0
    options: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_classifier(self) -> bool:
        return self.task == CLASSIFICATION

    @property
    def features(self) -> Tuple[str, ...]:
        return self.formula.features

    @property
    def feature_levels(self) -> Dict[str, Tuple[str, ...]]:
        """Level sets of the non-numeric features; they fix the one-hot layout."""
        return {
            c: self.schema[c].levels or ()
            for c in self.features
            if self.schema[c].ctype is not ColumnType.NUMERIC
        }

    def default_prediction_names(self) -> Tuple[str, ...]:
        if self.is_classifier:
            return tuple(f"pred_{c}" for c in self.classes)
        return (f"pred_{self.formula.response}",)

    def describe(self) -> str:
        return f"{self.algorithm.value} {self.task} model: {self.formula} ({self.n_train_rows} rows)"

    def save(self, path: str | Path) -> Path:
        """Persist with joblib; the file is staged and swapped in on success."""
        path = Path(path)
        tmp = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            joblib.dump(self, tmp)
            os.replace(tmp, path)
        except OSError as exc:
            if tmp.exists():
                tmp.unlink()
            raise DatasetIOError(f"Cannot save model to {path}: {exc}") from exc
        logger.info("Saved {} to {}", self.describe(), path)
        return path

    @classmethod
    def load(cls, path: str | Path) -> "FittedModel":
        path = Path(path)
        if not path.is_file():
            raise DatasetIOError(f"Model file not found: {path}")
        obj = joblib.load(path)
        if not isinstance(obj, cls):
            raise DataError(f"{path} does not contain a FittedModel (got {type(obj).__name__})")
        return obj
