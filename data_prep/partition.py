"""
Random train/validate (or N-way) partitioning of a dataset.

Each row gets one categorical draw over the label set. Rows are routed to the
label's output while the source is being read, so the whole split is a single
pass over the source: no intermediate "tagged" copy is written first.
"""

from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from loguru import logger

from core.errors import ConfigurationError
from core.log import log_timing
from core.utils import normalize_labels

from .dataset import DatasetHandle, DatasetWriter, infer_format

Labels = Sequence[Tuple[str, float]] | Mapping[str, float]

_FORMAT_SUFFIX = {"parquet": ".parquet", "csv": ".csv"}


def assign_partitions(n_rows: int, probabilities: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Draw one label index per row (independent, not stratified)."""
    if n_rows == 0:
        return np.empty(0, dtype=np.int64)
    return rng.choice(len(probabilities), size=n_rows, p=probabilities)


def default_destinations(
    dataset: DatasetHandle,
    names: Sequence[str],
    *,
    out_dir: Optional[str | Path] = None,
    fmt: Optional[str] = None,
) -> Dict[str, Path]:
    """``<out_dir>/<source stem>_<label><ext>``; out_dir defaults to the source's directory."""
    fmt = fmt or dataset.fmt
    folder = Path(out_dir) if out_dir is not None else dataset.path.parent
    return {name: folder / f"{dataset.path.stem}_{name}{_FORMAT_SUFFIX[fmt]}" for name in names}


@log_timing("partition")
def partition(
    dataset: DatasetHandle,
    labels: Labels = (("train", 0.75), ("validate", 0.25)),
    seed: Optional[int] = None,
    *,
    destinations: Optional[Mapping[str, str | Path]] = None,
    out_dir: Optional[str | Path] = None,
    fmt: Optional[str] = None,
    block_size: Optional[int] = None,
) -> Dict[str, DatasetHandle]:
    """
    Split ``dataset`` into one new dataset per label.

    Parameters
    ----------
    dataset : DatasetHandle
        Source rows.
    labels : sequence of (name, probability) or mapping
        With two labels the second gets ``1 - p`` of the first. With three or
        more, probabilities must sum to 1.
    seed : int, optional
        Fixes the draws. Without it results vary run to run.
    destinations : mapping label -> path, optional
        Explicit output files. Missing labels fall back to the default naming.
    out_dir, fmt : optional
        Directory and format for default destinations.
    block_size : int, optional
        Rows per source block (defaults to the handle's). Part of what makes a
        seeded split reproducible.

    Returns
    -------
    Dict label -> DatasetHandle of the written partition. Existing targets are
    replaced in full.
    """
    names, probs = normalize_labels(labels)
    if fmt is not None:
        infer_format("", fmt)

    targets = default_destinations(dataset, names, out_dir=out_dir, fmt=fmt)
    if destinations:
        unknown = sorted(set(destinations) - set(names))
        if unknown:
            raise ConfigurationError(f"Destinations given for unknown labels: {unknown}")
        targets.update({k: Path(v) for k, v in destinations.items()})

    resolved = {name: path.resolve() for name, path in targets.items()}
    if dataset.path.resolve() in resolved.values():
        raise ConfigurationError("A partition destination cannot be the source dataset itself")
    if len(set(resolved.values())) != len(resolved):
        raise ConfigurationError("Partition destinations must be distinct files")

    source = dataset.with_block_size(block_size) if block_size else dataset
    rng = np.random.default_rng(seed)

    logger.info(
        "Partitioning {} into {} (seed={})",
        dataset.path.name,
        {n: round(float(p), 4) for n, p in zip(names, probs)},
        seed,
    )

    with ExitStack() as stack:
        writers = {
            name: stack.enter_context(
                DatasetWriter(
                    targets[name],
                    fmt=fmt,
                    categorical=dataset.categorical,
                    block_size=dataset.block_size,
                )
            )
            for name in names
        }
        for block in source.iter_blocks():
            idx = assign_partitions(len(block), probs, rng)
            for i, name in enumerate(names):
                # empty parts still hand the writer a typed template
                writers[name].write(block.loc[idx == i].reset_index(drop=True))
        for w in writers.values():
            if w.template is None:
                w.template = pd.DataFrame(columns=source.columns)

    out = {name: writers[name].handle for name in names}
    logger.info("Partition sizes: {}", {name: w.rows_written for name, w in writers.items()})
    return out


@log_timing("tag_partitions")
def tag_partitions(
    dataset: DatasetHandle,
    labels: Labels = (("train", 0.75), ("validate", 0.25)),
    seed: Optional[int] = None,
    *,
    column: str = "partition",
    output: Optional[str | Path] = None,
    block_size: Optional[int] = None,
) -> DatasetHandle:
    """
    Append a label column instead of splitting.

    With ``output=None`` the source itself is rewritten: the tagged copy is
    staged and swapped in only after the whole pass succeeds.
    """
    names, probs = normalize_labels(labels)
    source = dataset.with_block_size(block_size) if block_size else dataset
    if column in source.schema:
        raise ConfigurationError(f"Column {column!r} already exists in {dataset.path.name}")

    target = Path(output) if output is not None else dataset.path
    categorical = dict(dataset.categorical)
    categorical[column] = names
    rng = np.random.default_rng(seed)
    lookup = np.array(names, dtype=object)

    with DatasetWriter(target, fmt=None if output is not None else dataset.fmt,
                       categorical=categorical, block_size=dataset.block_size) as w:
        for block in source.iter_blocks():
            idx = assign_partitions(len(block), probs, rng)
            block[column] = pd.Categorical(lookup[idx], categories=list(names))
            w.write(block)
        if w.template is None:
            template = pd.DataFrame(columns=source.columns)
            template[column] = pd.Categorical([], categories=list(names))
            w.template = template

    logger.info("Tagged {} rows of {} with column {!r}", w.rows_written, dataset.path.name, column)
    return w.handle
