from __future__ import annotations

from typing import Dict, Type

from core.errors import ConfigurationError

from .base import Algorithm, Trainable
from .linear import LinearRegressionModel
from .logistic import LogisticRegressionModel
from .trees import DecisionTreeModel, GradientBoostingModel, RandomForestModel

_REGISTRY: Dict[Algorithm, Type[Trainable]] = {
    Algorithm.LINEAR: LinearRegressionModel,
    Algorithm.LOGISTIC: LogisticRegressionModel,
    Algorithm.DECISION_TREE: DecisionTreeModel,
    Algorithm.RANDOM_FOREST: RandomForestModel,
    Algorithm.GRADIENT_BOOSTING: GradientBoostingModel,
}


def resolve_algorithm(algorithm: Algorithm | str) -> Algorithm:
    if isinstance(algorithm, Algorithm):
        return algorithm
    try:
        return Algorithm(str(algorithm).lower())
    except ValueError:
        available = ", ".join(a.value for a in Algorithm)
        raise ConfigurationError(f"Unknown algorithm {algorithm!r}. Available: {available}") from None


def get_trainable(algorithm: Algorithm | str) -> Trainable:
    return _REGISTRY[resolve_algorithm(algorithm)]()


def available_algorithms() -> list[str]:
    return [a.value for a in _REGISTRY]
