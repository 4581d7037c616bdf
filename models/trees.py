"""
Tree-based strategies: a single decision tree, a random forest and gradient
boosted trees.

They capture non-linear patterns and interactions a logistic model misses,
e.g. low credit score combined with high card debt being much worse than
either alone.

Task follows the response unless the ``task`` option pins it: a numeric
response gives a regression tree, a factor/string response a classification
tree. A 0/1 numeric response therefore needs ``task="classification"``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import Field, PositiveInt
from sklearn.ensemble import (
    HistGradientBoostingClassifier,
    HistGradientBoostingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from .base import CLASSIFICATION, Algorithm, AlgorithmOptions, Trainable

Task = Optional[Literal["classification", "regression"]]


class DecisionTreeOptions(AlgorithmOptions):
    task: Task = None
    max_depth: Optional[int] = Field(10, ge=1)
    min_samples_split: int = Field(20, ge=2)
    min_samples_leaf: int = Field(7, ge=1)
    ccp_alpha: float = Field(0.0, ge=0)
    random_state: Optional[int] = None


class DecisionTreeModel(Trainable):
    algorithm = Algorithm.DECISION_TREE
    Options = DecisionTreeOptions

    def build_estimator(self, task: str, options: DecisionTreeOptions):
        cls = DecisionTreeClassifier if task == CLASSIFICATION else DecisionTreeRegressor
        return cls(
            max_depth=options.max_depth,
            min_samples_split=options.min_samples_split,
            min_samples_leaf=options.min_samples_leaf,
            ccp_alpha=options.ccp_alpha,
            random_state=options.random_state,
        )


class RandomForestOptions(AlgorithmOptions):
    task: Task = None
    n_estimators: int = Field(100, ge=1)
    max_depth: Optional[int] = Field(None, ge=1)
    min_samples_leaf: int = Field(1, ge=1)
    # int = number of features, float = share of features
    max_features: Union[Literal["sqrt", "log2"], PositiveInt, Annotated[float, Field(gt=0, le=1)], None] = "sqrt"
    n_jobs: Optional[int] = None
    random_state: Optional[int] = None


class RandomForestModel(Trainable):
    algorithm = Algorithm.RANDOM_FOREST
    Options = RandomForestOptions

    def build_estimator(self, task: str, options: RandomForestOptions):
        cls = RandomForestClassifier if task == CLASSIFICATION else RandomForestRegressor
        return cls(
            n_estimators=options.n_estimators,
            max_depth=options.max_depth,
            min_samples_leaf=options.min_samples_leaf,
            max_features=options.max_features,
            n_jobs=options.n_jobs,
            random_state=options.random_state,
        )


class GradientBoostingOptions(AlgorithmOptions):
    task: Task = None
    max_iter: int = Field(100, ge=1)
    learning_rate: float = Field(0.1, gt=0)
    max_depth: Optional[int] = Field(None, ge=1)
    min_samples_leaf: int = Field(20, ge=1)
    l2_regularization: float = Field(0.0, ge=0)
    random_state: Optional[int] = None


class GradientBoostingModel(Trainable):
    algorithm = Algorithm.GRADIENT_BOOSTING
    Options = GradientBoostingOptions

    def build_estimator(self, task: str, options: GradientBoostingOptions):
        cls = HistGradientBoostingClassifier if task == CLASSIFICATION else HistGradientBoostingRegressor
        return cls(
            max_iter=options.max_iter,
            learning_rate=options.learning_rate,
            max_depth=options.max_depth,
            min_samples_leaf=options.min_samples_leaf,
            l2_regularization=options.l2_regularization,
            early_stopping=False,
            random_state=options.random_state,
        )
