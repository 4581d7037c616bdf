"""
Model formulas: ``response ~ feature_1 + feature_2 + ...``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence, Tuple

from core.errors import ConfigurationError, DataError

from .dataset import DatasetHandle


@dataclass(frozen=True)
class Formula:
    response: str
    features: Tuple[str, ...]

    def __post_init__(self) -> None:
        if self.response in self.features:
            raise DataError(f"Response {self.response!r} cannot also be a feature")
        if not self.features:
            raise DataError(f"Formula for {self.response!r} has no features")
        if len(set(self.features)) != len(self.features):
            raise DataError(f"Duplicate features in formula: {list(self.features)}")

    def __str__(self) -> str:
        return f"{self.response} ~ {' + '.join(self.features)}"

    @property
    def columns(self) -> Tuple[str, ...]:
        """Response first, then features."""
        return (self.response,) + self.features

    @classmethod
    def parse(cls, text: str) -> "Formula":
        """Read ``"y ~ a + b"`` back into a Formula."""
        if text.count("~") != 1:
            raise ConfigurationError(f"Formula must contain exactly one '~': {text!r}")
        lhs, rhs = (part.strip() for part in text.split("~"))
        features = tuple(t.strip() for t in rhs.split("+") if t.strip())
        if not lhs:
            raise ConfigurationError(f"Formula has no response: {text!r}")
        return cls(response=lhs, features=features)


def _schema_names(schema) -> List[str]:
    if isinstance(schema, DatasetHandle):
        return schema.columns
    if isinstance(schema, Mapping):
        return list(schema)
    return list(schema)


def build_formula(
    schema: DatasetHandle | Mapping[str, object] | Sequence[str],
    response: str,
    exclude: Iterable[str] = (),
) -> Formula:
    """
    Every column except the response and the excluded ones becomes a feature.

    Exclusion is by exact column name; excluding "year" leaves "yearsEmploy" in.
    Features keep schema order.
    """
    names = _schema_names(schema)
    if response not in names:
        raise DataError(f"Response column {response!r} not found; available: {names}")

    excluded = set(exclude)
    features = tuple(c for c in names if c != response and c not in excluded)
    return Formula(response=response, features=features)
