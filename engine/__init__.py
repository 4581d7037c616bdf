"""
Training and scoring harness — fits FittedModels and applies them to datasets.
"""

from .trainer import train
from .scorer import predict_frame, score

__all__ = ["train", "score", "predict_frame"]
