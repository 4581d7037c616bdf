"""
Fitting strategies, one per algorithm, behind a common ``Trainable`` interface:

  linear             ordinary least squares            (regression)
  logistic           logistic regression / PD model    (classification)
  decision_tree      single CART tree                  (either)
  random_forest      bagged trees                      (either)
  gradient_boosting  histogram gradient boosted trees  (either)

Model math is scikit-learn's; this package only validates options and records
what a fitted model needs for scoring (``FittedModel``).
"""

from .base import Algorithm, AlgorithmOptions, FittedModel, Trainable
from .registry import available_algorithms, get_trainable, resolve_algorithm

__all__ = [
    "Algorithm",
    "AlgorithmOptions",
    "FittedModel",
    "Trainable",
    "available_algorithms",
    "get_trainable",
    "resolve_algorithm",
]
