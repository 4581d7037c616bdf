"""
Error taxonomy. Everything surfaces to the caller immediately; nothing here is retried.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Bad options: empty/duplicate partition labels, unsummed probabilities, unknown algorithm options."""


class DataError(ValueError):
    """Missing column, schema mismatch between model and dataset, incompatible column type."""


class DatasetIOError(OSError):
    """Unreadable source or unwritable destination."""
