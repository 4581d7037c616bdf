from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import pandas as pd
import pyarrow as pa


class ColumnType(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    STRING = "string"


@dataclass(frozen=True)
class Column:
    """One schema entry. ``levels`` is only set for categorical columns with a fixed level set."""

    name: str
    ctype: ColumnType
    levels: Optional[Tuple[str, ...]] = None

    @property
    def is_numeric(self) -> bool:
        return self.ctype is ColumnType.NUMERIC


# Columns of the mortgage-default teaching dataset, in file order.
MORTGAGE_DEFAULT_COLUMNS: Tuple[str, ...] = (
    "creditScore",
    "houseAge",
    "yearsEmploy",
    "ccDebt",
    "year",
    "default",
)

MORTGAGE_RESPONSE = "default"
MORTGAGE_DEFAULT_LEVELS: Tuple[str, ...] = ("current", "default")


def column_from_series(name: str, series: pd.Series) -> Column:
    """Infer a Column from a pandas Series (bool counts as numeric)."""
    if isinstance(series.dtype, pd.CategoricalDtype):
        levels = tuple(str(c) for c in series.cat.categories)
        return Column(name, ColumnType.CATEGORICAL, levels)
    if pd.api.types.is_bool_dtype(series) or pd.api.types.is_numeric_dtype(series):
        return Column(name, ColumnType.NUMERIC)
    return Column(name, ColumnType.STRING)


def column_from_arrow(field: pa.Field) -> Column:
    """Infer a Column from a parquet/arrow field. Dictionary levels are discovered on read."""
    t = field.type
    if pa.types.is_dictionary(t):
        return Column(field.name, ColumnType.CATEGORICAL)
    if pa.types.is_integer(t) or pa.types.is_floating(t) or pa.types.is_boolean(t) or pa.types.is_decimal(t):
        return Column(field.name, ColumnType.NUMERIC)
    return Column(field.name, ColumnType.STRING)
