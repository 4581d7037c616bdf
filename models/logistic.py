"""
Logistic regression — the probability-of-default workhorse.

PD = logistic(b0 + b1*creditScore + b2*ccDebt + ...)

Features are standardized inside the pipeline by default so the solver
converges on raw dollar/score scales.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import make_pipeline
from sklearn.preprocessing import StandardScaler

from .base import CLASSIFICATION, Algorithm, AlgorithmOptions, Trainable


class LogisticOptions(AlgorithmOptions):
    C: float = Field(1.0, gt=0)
    max_iter: int = Field(1000, ge=1)
    fit_intercept: bool = True
    standardize: bool = True
    class_weight: Optional[Literal["balanced"]] = None


class LogisticRegressionModel(Trainable):
    algorithm = Algorithm.LOGISTIC
    Options = LogisticOptions
    task = CLASSIFICATION

    def build_estimator(self, task: str, options: LogisticOptions):
        clf = LogisticRegression(
            C=options.C,
            max_iter=options.max_iter,
            fit_intercept=options.fit_intercept,
            class_weight=options.class_weight,
        )
        if options.standardize:
            return make_pipeline(StandardScaler(), clf)
        return clf
