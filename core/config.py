"""
Workflow configuration.
Algorithm options live with each algorithm (models/*.py, pydantic option models).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import ConfigurationError
from .utils import normalize_labels

DEFAULT_BLOCK_SIZE = 100_000


@dataclass(frozen=True)
class PartitionConfig:
    labels: Tuple[Tuple[str, float], ...] = (("train", 0.75), ("validate", 0.25))
    seed: Optional[int] = None

    # rows per block read from the source; also fixes the sequence of random draws
    block_size: int = DEFAULT_BLOCK_SIZE

    def __post_init__(self) -> None:
        if self.block_size <= 0:
            raise ConfigurationError(f"block_size must be positive, got {self.block_size}")
        normalize_labels(self.labels)

    @classmethod
    def two_way(cls, p: float, *, seed: Optional[int] = None, names: Tuple[str, str] = ("train", "validate"),
                block_size: int = DEFAULT_BLOCK_SIZE) -> "PartitionConfig":
        return cls(labels=((names[0], p), (names[1], 1.0 - p)), seed=seed, block_size=block_size)


@dataclass(frozen=True)
class ScoreOptions:
    write_input_columns: bool = False
    extra_columns_to_copy: Tuple[str, ...] = ()

    # None -> pred_<response> for regression, pred_<level> per class for classifiers
    prediction_column_names: Optional[Tuple[str, ...]] = None
