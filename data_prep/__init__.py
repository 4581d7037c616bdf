"""
Data preparation — dataset handles, partitioning, formulas, simulated data, validation.
"""

from .dataset import DatasetHandle, DatasetWriter, infer_format, write_frame
from .formula import Formula, build_formula
from .loader import open_dataset, open_mortgage_dataset
from .partition import assign_partitions, partition, tag_partitions
from .simulate import MortgageSimulationParams, simulate_mortgage_defaults, write_mortgage_dataset
from .summary import summarize_dataset
from .validators import ValidationResult, validate_mortgage_dataset

__all__ = [
    "DatasetHandle",
    "DatasetWriter",
    "infer_format",
    "write_frame",
    "Formula",
    "build_formula",
    "open_dataset",
    "open_mortgage_dataset",
    "assign_partitions",
    "partition",
    "tag_partitions",
    "MortgageSimulationParams",
    "simulate_mortgage_defaults",
    "write_mortgage_dataset",
    "summarize_dataset",
    "ValidationResult",
    "validate_mortgage_dataset",
]
