from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Sequence

from core.config import DEFAULT_BLOCK_SIZE
from core.schema import MORTGAGE_DEFAULT_LEVELS, MORTGAGE_RESPONSE

from .dataset import DatasetHandle


def open_dataset(
    path: str | Path,
    *,
    fmt: Optional[str] = None,
    categorical: Optional[Mapping[str, Sequence]] = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> DatasetHandle:
    """Open an existing parquet/csv file as a DatasetHandle (schema is read on first use)."""
    return DatasetHandle(path, fmt=fmt, categorical=categorical, block_size=block_size)


def open_mortgage_dataset(path: str | Path, *, block_size: int = DEFAULT_BLOCK_SIZE) -> DatasetHandle:
    """
    Open the mortgage-default file with ``default`` declared as a current/default factor.
    Works the same for the parquet and csv renditions.
    """
    return open_dataset(
        path,
        categorical={MORTGAGE_RESPONSE: MORTGAGE_DEFAULT_LEVELS},
        block_size=block_size,
    )
