"""
Ordinary least squares for a numeric response (e.g. balance or loss amounts).
"""

from __future__ import annotations

from sklearn.linear_model import LinearRegression

from .base import REGRESSION, Algorithm, AlgorithmOptions, Trainable


class LinearOptions(AlgorithmOptions):
    fit_intercept: bool = True


class LinearRegressionModel(Trainable):
    algorithm = Algorithm.LINEAR
    Options = LinearOptions
    task = REGRESSION

    def build_estimator(self, task: str, options: LinearOptions):
        return LinearRegression(fit_intercept=options.fit_intercept)
