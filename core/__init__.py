"""
Core package — column schema, configuration, error taxonomy, logging and shared utilities.
No modeling logic lives here.
"""

from .schema import (
    Column,
    ColumnType,
    MORTGAGE_DEFAULT_COLUMNS,
    MORTGAGE_DEFAULT_LEVELS,
    MORTGAGE_RESPONSE,
)
from .config import DEFAULT_BLOCK_SIZE, PartitionConfig, ScoreOptions
from .errors import ConfigurationError, DataError, DatasetIOError
from .log import configure_logging, log_timing
from .utils import normalize_labels, require_columns

__all__ = [
    "Column",
    "ColumnType",
    "MORTGAGE_DEFAULT_COLUMNS",
    "MORTGAGE_DEFAULT_LEVELS",
    "MORTGAGE_RESPONSE",
    "DEFAULT_BLOCK_SIZE",
    "PartitionConfig",
    "ScoreOptions",
    "ConfigurationError",
    "DataError",
    "DatasetIOError",
    "configure_logging",
    "log_timing",
    "normalize_labels",
    "require_columns",
]
