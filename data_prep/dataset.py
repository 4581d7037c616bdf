"""
Dataset handles over disk-resident tables.

Two storage formats sit behind the same handle:
  - parquet (column-oriented binary, read in record batches through pyarrow)
  - csv     (delimited text, read in chunks through pandas)

Nothing is loaded wholesale: ``iter_blocks`` yields pandas blocks of at most
``block_size`` rows and can be restarted any number of times.

Writes go through ``DatasetWriter``, which stages into a temporary sibling file
and swaps it over the destination only when the write completes.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq
from loguru import logger

from core.config import DEFAULT_BLOCK_SIZE
from core.errors import ConfigurationError, DatasetIOError
from core.schema import Column, ColumnType, column_from_arrow, column_from_series
from core.utils import require_columns

_SUFFIX_FORMATS: Dict[str, str] = {
    ".parquet": "parquet",
    ".pq": "parquet",
    ".csv": "csv",
    ".txt": "csv",
}
FORMATS = ("parquet", "csv")


def infer_format(path: str | Path, fmt: Optional[str] = None) -> str:
    if fmt is not None:
        if fmt not in FORMATS:
            raise ConfigurationError(f"Unknown dataset format {fmt!r}; expected one of {FORMATS}")
        return fmt
    suffix = Path(path).suffix.lower()
    if suffix not in _SUFFIX_FORMATS:
        raise ConfigurationError(
            f"Cannot infer dataset format from {str(path)!r}; use one of {sorted(_SUFFIX_FORMATS)} or pass fmt="
        )
    return _SUFFIX_FORMATS[suffix]


class DatasetHandle:
    """
    Reference to a schema'd table on disk.

    Parameters
    ----------
    path : str or Path
        Location of the file.
    fmt : str, optional
        "parquet" or "csv"; inferred from the suffix when omitted.
    categorical : mapping of column -> levels, optional
        Columns to treat as factors with a fixed level set. Every block read
        through this handle casts them to ``pd.Categorical`` with these levels.
    block_size : int
        Maximum rows per block yielded by ``iter_blocks``.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        fmt: Optional[str] = None,
        categorical: Optional[Mapping[str, Sequence]] = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        if block_size <= 0:
            raise ConfigurationError(f"block_size must be positive, got {block_size}")
        self.path = Path(path)
        self.fmt = infer_format(self.path, fmt)
        self.categorical: Dict[str, tuple] = {
            k: tuple(str(v) for v in levels) for k, levels in (categorical or {}).items()
        }
        self.block_size = int(block_size)
        self._schema: Optional[Dict[str, Column]] = None
        self._num_rows: Optional[int] = None

    def __repr__(self) -> str:
        return f"DatasetHandle({str(self.path)!r}, fmt={self.fmt!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DatasetHandle):
            return NotImplemented
        return self.path.resolve() == other.path.resolve() and self.fmt == other.fmt

    def __hash__(self) -> int:
        return hash((str(self.path.resolve()), self.fmt))

    @property
    def exists(self) -> bool:
        return self.path.is_file()

    def with_block_size(self, block_size: int) -> "DatasetHandle":
        return DatasetHandle(self.path, fmt=self.fmt, categorical=self.categorical, block_size=block_size)

    # ------------------------------------------------------------------
    # schema / size
    # ------------------------------------------------------------------
    @property
    def schema(self) -> Dict[str, Column]:
        """Ordered column name -> Column. Discovered on first access."""
        if self._schema is None:
            self._schema = self._discover_schema()
        return dict(self._schema)

    @property
    def columns(self) -> List[str]:
        return list(self.schema)

    @property
    def num_rows(self) -> int:
        if self._num_rows is None:
            if self.fmt == "parquet":
                self._num_rows = self._parquet_file().metadata.num_rows
            else:
                first = self.columns[:1]
                self._num_rows = sum(len(b) for b in self.iter_blocks(columns=first))
        return self._num_rows

    def _discover_schema(self) -> Dict[str, Column]:
        self._check_readable()
        if self.fmt == "parquet":
            try:
                arrow_schema = pq.read_schema(self.path)
            except (OSError, pa.ArrowException) as exc:
                raise DatasetIOError(f"Cannot read parquet schema from {self.path}: {exc}") from exc
            cols = {f.name: column_from_arrow(f) for f in arrow_schema}
        else:
            try:
                head = pd.read_csv(self.path, nrows=min(self.block_size, 1000))
            except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
                raise DatasetIOError(f"Cannot read csv header from {self.path}: {exc}") from exc
            cols = {name: column_from_series(name, head[name]) for name in head.columns}

        for name, levels in self.categorical.items():
            if name in cols:
                cols[name] = Column(name, ColumnType.CATEGORICAL, levels)
        return cols

    def _check_readable(self) -> None:
        if not self.path.is_file():
            raise DatasetIOError(f"Dataset not found: {self.path}")
        if not os.access(self.path, os.R_OK):
            raise DatasetIOError(f"Dataset is not readable: {self.path}")

    def _parquet_file(self) -> pq.ParquetFile:
        self._check_readable()
        try:
            return pq.ParquetFile(self.path)
        except (OSError, pa.ArrowException) as exc:
            raise DatasetIOError(f"Cannot open parquet file {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    # reading
    # ------------------------------------------------------------------
    def iter_blocks(self, columns: Optional[Sequence[str]] = None) -> Iterator[pd.DataFrame]:
        """Yield the rows as pandas blocks of at most ``block_size`` rows, in file order."""
        cols = list(columns) if columns is not None else None
        if cols is not None:
            require_columns(self.schema, cols, what=str(self.path))
        return self._iter_blocks(cols)

    def _iter_blocks(self, cols: Optional[List[str]]) -> Iterator[pd.DataFrame]:
        if self.fmt == "parquet":
            pf = self._parquet_file()
            try:
                for batch in pf.iter_batches(batch_size=self.block_size, columns=cols):
                    yield self._apply_levels(batch.to_pandas())
            except (OSError, pa.ArrowException) as exc:
                raise DatasetIOError(f"Failed reading {self.path}: {exc}") from exc
            finally:
                pf.close()
        else:
            self._check_readable()
            try:
                reader = pd.read_csv(self.path, chunksize=self.block_size, usecols=cols)
                with reader:
                    for chunk in reader:
                        if cols is not None:
                            chunk = chunk[cols]
                        yield self._apply_levels(chunk.reset_index(drop=True))
            except (OSError, pd.errors.ParserError) as exc:
                raise DatasetIOError(f"Failed reading {self.path}: {exc}") from exc
            except pd.errors.EmptyDataError:
                return

    def _apply_levels(self, block: pd.DataFrame) -> pd.DataFrame:
        for name, levels in self.categorical.items():
            if name in block.columns:
                values = block[name]
                if isinstance(values.dtype, pd.CategoricalDtype):
                    values = values.astype(str)
                elif not pd.api.types.is_string_dtype(values) and not pd.api.types.is_object_dtype(values):
                    values = values.map(as_level_text)
                block[name] = pd.Categorical(values, categories=list(levels))
        return block

    def read(self, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """Concatenate every block into one frame. Only for data known to fit in memory."""
        blocks = list(self.iter_blocks(columns))
        if not blocks:
            names = list(columns) if columns is not None else self.columns
            return pd.DataFrame(columns=names)
        return pd.concat(blocks, ignore_index=True)


def as_level_text(value) -> Optional[str]:
    """Render numeric codes the way they appear in csv text (1.0 -> "1")."""
    if pd.isna(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class DatasetWriter:
    """
    Staged, replace-on-success writer.

    Usage:
        with DatasetWriter("out.parquet") as w:
            for block in blocks:
                w.write(block)
        handle = w.handle

    Output is written to ``<name>.<pid>.tmp`` next to the destination. On a clean
    exit it replaces the destination in a single ``os.replace``; on error the
    staged file is deleted and the old destination is left untouched.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        fmt: Optional[str] = None,
        template: Optional[pd.DataFrame] = None,
        categorical: Optional[Mapping[str, Sequence]] = None,
        block_size: int = DEFAULT_BLOCK_SIZE,
    ):
        self.path = Path(path)
        self.fmt = infer_format(self.path, fmt)
        self.template = template.iloc[:0] if template is not None else None
        self.categorical = dict(categorical or {})
        self.block_size = block_size
        self.rows_written = 0
        self.handle: Optional[DatasetHandle] = None

        self._tmp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        self._parquet: Optional[pq.ParquetWriter] = None
        self._arrow_schema: Optional[pa.Schema] = None
        self._csv_header_written = False
        self._open = False

    def __enter__(self) -> "DatasetWriter":
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise DatasetIOError(f"Cannot create directory for {self.path}: {exc}") from exc
        if not os.access(self.path.parent, os.W_OK):
            raise DatasetIOError(f"Destination directory is not writable: {self.path.parent}")
        self._open = True
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.abort()
        return False

    def write(self, block: pd.DataFrame) -> None:
        if not self._open:
            raise RuntimeError("DatasetWriter.write() called outside of its context")
        if self.template is None:
            self.template = block.iloc[:0]
        if block.empty:
            return
        try:
            if self.fmt == "parquet":
                self._write_parquet(block)
            else:
                self._write_csv(block)
        except (OSError, pa.ArrowException) as exc:
            raise DatasetIOError(f"Failed writing {self.path}: {exc}") from exc
        self.rows_written += len(block)

    def _write_parquet(self, block: pd.DataFrame) -> None:
        table = pa.Table.from_pandas(block, preserve_index=False)
        if self._parquet is None:
            self._arrow_schema = table.schema
            self._parquet = pq.ParquetWriter(self._tmp_path, self._arrow_schema)
        elif not table.schema.equals(self._arrow_schema, check_metadata=False):
            table = table.cast(self._arrow_schema)
        self._parquet.write_table(table)

    def _write_csv(self, block: pd.DataFrame) -> None:
        header = not self._csv_header_written
        block.to_csv(self._tmp_path, mode="w" if header else "a", header=header, index=False)
        self._csv_header_written = True

    def commit(self) -> DatasetHandle:
        if not self._open:
            raise RuntimeError("DatasetWriter is not open")
        try:
            if self.fmt == "parquet":
                if self._parquet is None:
                    self._write_parquet(self._empty_frame())
                self._parquet.close()
                self._parquet = None
            elif not self._csv_header_written:
                self._write_csv(self._empty_frame())
            with open(self._tmp_path, "rb") as fh:
                os.fsync(fh.fileno())
            os.replace(self._tmp_path, self.path)
        except (OSError, pa.ArrowException) as exc:
            self.abort()
            raise DatasetIOError(f"Failed to commit {self.path}: {exc}") from exc

        self._open = False
        logger.debug("Wrote {} rows to {}", self.rows_written, self.path)
        self.handle = DatasetHandle(
            self.path, fmt=self.fmt, categorical=self.categorical, block_size=self.block_size
        )
        return self.handle

    def abort(self) -> None:
        self._open = False
        if self._parquet is not None:
            try:
                self._parquet.close()
            except (OSError, pa.ArrowException):
                logger.warning("Could not close staged parquet writer for {}", self.path)
            self._parquet = None
        if self._tmp_path.exists():
            self._tmp_path.unlink()
            logger.debug("Discarded staged output {}", self._tmp_path)

    def _empty_frame(self) -> pd.DataFrame:
        if self.template is None:
            raise DatasetIOError(f"Nothing was written to {self.path} and no template schema was given")
        return self.template


def write_frame(
    frame: pd.DataFrame,
    path: str | Path,
    *,
    fmt: Optional[str] = None,
    categorical: Optional[Mapping[str, Sequence]] = None,
    block_size: int = DEFAULT_BLOCK_SIZE,
) -> DatasetHandle:
    """Write an in-memory frame as a dataset (atomic replace)."""
    with DatasetWriter(path, fmt=fmt, template=frame, categorical=categorical, block_size=block_size) as w:
        for start in range(0, len(frame), block_size):
            w.write(frame.iloc[start:start + block_size])
    return w.handle
