from __future__ import annotations

from typing import Iterable, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import ConfigurationError, DataError

# Probabilities for three or more labels must sum to 1 within this tolerance.
PROBABILITY_TOLERANCE = 1e-9


def require_columns(available: Iterable[str], cols: Iterable[str], *, what: str = "dataset") -> None:
    present = set(available.columns if isinstance(available, pd.DataFrame) else available)
    missing = [c for c in cols if c not in present]
    if missing:
        raise DataError(f"Missing required columns in {what}: {missing}")


def normalize_labels(labels: Sequence[Tuple[str, float]] | Mapping[str, float]) -> Tuple[Tuple[str, ...], np.ndarray]:
    """
    Validate (name, probability) pairs and return names plus a probability vector summing to 1.

    Two labels: the second label gets 1 - p of the first, whatever was passed for it.
    Three or more: the probabilities must already sum to 1.
    """
    pairs = list(labels.items()) if isinstance(labels, Mapping) else [tuple(x) for x in labels]
    if not pairs:
        raise ConfigurationError("At least one partition label is required.")

    names = tuple(str(name) for name, _ in pairs)
    dup = sorted({n for n in names if names.count(n) > 1})
    if dup:
        raise ConfigurationError(f"Duplicate partition labels: {dup}")

    probs = np.array([float(p) for _, p in pairs], dtype=float)
    if np.any(~np.isfinite(probs)) or np.any(probs < 0):
        raise ConfigurationError(f"Partition probabilities must be finite and >= 0, got {probs.tolist()}")

    if len(names) == 1:
        return names, np.array([1.0])
    if len(names) == 2:
        first = probs[0]
        if first > 1.0:
            raise ConfigurationError(f"Probability for {names[0]!r} must be <= 1, got {first}")
        return names, np.array([first, 1.0 - first])

    if abs(probs.sum() - 1.0) > PROBABILITY_TOLERANCE:
        raise ConfigurationError(
            f"Probabilities for {len(names)} labels must sum to 1, got {probs.sum():.6f}"
        )
    return names, probs / probs.sum()
