"""Column-major tabular data store.

A table has a header of column names ("categories"), a type tag for each
column, and the data itself stored column by column. Each column must hold
values of a single type. Column names are case sensitive.

Tables are loaded in one shot, either from a list of uniform records or from a
list of rows whose first row is the header. Loading never partially succeeds:
malformed input leaves the table exactly as it was.

Example:
    >>> table = Table.from_rows(
    ...     [["Model", "Price"], ["SE", 21992], ["SEL", 20995]],
    ...     [ColumnType.CHARACTER, ColumnType.NUMERIC],
    ... )
    >>> table.get_column("Price")
    [21992, 20995]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import IO, Any

import pandas as pd

logger = logging.getLogger(__name__)

# Keys added by record stores that are never treated as data columns
RESERVED_KEYS = ("_id", "id")


class ColumnType(str, Enum):
    """Type tag for a table column."""

    NUMERIC = "numeric"
    CHARACTER = "character"
    BOOLEAN = "boolean"

    @classmethod
    def parse(cls, value: ColumnType | str) -> ColumnType:
        """Accept a ColumnType, its value ('numeric') or its name ('NUMERIC')."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls[str(value).upper()]

    @classmethod
    def from_dtype(cls, dtype: Any) -> ColumnType:
        """Infer a column type from a pandas/numpy dtype."""
        if pd.api.types.is_bool_dtype(dtype):
            return cls.BOOLEAN
        if pd.api.types.is_numeric_dtype(dtype):
            return cls.NUMERIC
        return cls.CHARACTER


@dataclass
class SplitResult:
    """Row-wise split of column-major data.

    Attributes:
        train: Rows 0..row (inclusive) of every column
        test: Remaining rows of every column
    """

    train: list[list[Any]] = field(default_factory=list)
    test: list[list[Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {"train": self.train, "test": self.test}


def _coerce_types(types: Sequence[ColumnType | str] | None) -> list[ColumnType] | None:
    if not types:
        return None
    try:
        return [ColumnType.parse(t) for t in types]
    except (KeyError, ValueError):
        return None


class Table:
    """Column-major table of numeric, character or boolean columns.

    Attributes:
        categories: Column names in input order
        data_types: Type tag of each column
        size: Number of rows
        column_count: Number of columns
    """

    def __init__(self) -> None:
        self._table: list[list[Any]] = []
        self._categories: list[str] = []
        self._types: list[ColumnType] = []

        # Most recently fetched column
        self._cached_name: str | None = None
        self._cached_column: list[Any] = []

    # === Loading ===

    @classmethod
    def from_records(
        cls,
        records: Sequence[Mapping[str, Any]],
        types: Sequence[ColumnType | str],
    ) -> Table:
        """Create a table from uniform records (see ``load_records``)."""
        table = cls()
        table.load_records(records, types)
        return table

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Any]],
        types: Sequence[ColumnType | str],
    ) -> Table:
        """Create a table from a header row plus data rows (see ``load_rows``)."""
        table = cls()
        table.load_rows(rows, types)
        return table

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        types: Sequence[ColumnType | str] | None = None,
    ) -> Table:
        """Create a table from a DataFrame.

        Args:
            df: Source data; column labels become category names
            types: Column types (inferred from dtypes when None)
        """
        if types is None:
            types = [ColumnType.from_dtype(dtype) for dtype in df.dtypes]

        header = [str(c) for c in df.columns]
        rows = [header] + df.astype(object).values.tolist()
        return cls.from_rows(rows, types)

    @classmethod
    def read_csv(
        cls,
        source: str | Path | IO[str],
        types: Sequence[ColumnType | str] | None = None,
        **read_kwargs: Any,
    ) -> Table:
        """Create a table from delimited text.

        Args:
            source: Path or text buffer
            types: Column types (inferred when None)
            **read_kwargs: Passed through to ``pandas.read_csv`` (e.g. ``sep``)
        """
        df = pd.read_csv(source, **read_kwargs)
        return cls.from_dataframe(df, types)

    def load_records(
        self,
        records: Sequence[Mapping[str, Any]],
        types: Sequence[ColumnType | str],
    ) -> bool:
        """Load from records whose keys are the column names.

        Keys are taken from the first record; ``id`` and ``_id`` keys are
        dropped. ``types`` must have one entry per remaining key.

        Returns:
            True if the table was loaded, False if the input was rejected
        """
        if not records:
            logger.debug("load_records: no records supplied, table unchanged")
            return False

        column_types = _coerce_types(types)
        keys = [k for k in records[0].keys() if k not in RESERVED_KEYS]
        if column_types is None or len(column_types) != len(keys):
            logger.debug(
                f"load_records: {len(keys)} columns but types={types!r}, table unchanged"
            )
            return False

        columns: list[list[Any]] = [[] for _ in keys]
        for record in records:
            for j, key in enumerate(keys):
                columns[j].append(record.get(key))

        self._reset(keys, column_types, columns)
        return True

    def load_rows(
        self,
        rows: Sequence[Sequence[Any]],
        types: Sequence[ColumnType | str],
    ) -> bool:
        """Load from a list of rows; the first row is always the header.

        Header names must be unique. Rows shorter than the header are padded
        with None.

        Returns:
            True if the table was loaded, False if the input was rejected
        """
        if not rows or len(rows) < 2:
            logger.debug("load_rows: need a header row and at least one data row")
            return False

        column_types = _coerce_types(types)
        header = [str(name) for name in rows[0]]
        if column_types is None or len(header) != len(column_types):
            logger.debug(
                f"load_rows: header has {len(header)} columns but types={types!r}, "
                "table unchanged"
            )
            return False
        if len(set(header)) != len(header):
            logger.debug(f"load_rows: duplicate column names in {header!r}, table unchanged")
            return False

        columns: list[list[Any]] = [[] for _ in header]
        for row in rows[1:]:
            for j in range(len(header)):
                columns[j].append(row[j] if j < len(row) else None)

        self._reset(header, column_types, columns)
        return True

    def _reset(
        self,
        categories: list[str],
        types: list[ColumnType],
        columns: list[list[Any]],
    ) -> None:
        self._categories = list(categories)
        self._types = list(types)
        self._table = columns
        self._cached_name = None
        self._cached_column = []

    # === Access ===

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def data_types(self) -> list[ColumnType]:
        return list(self._types)

    @property
    def table(self) -> list[list[Any]]:
        """Copy of the data, column-major."""
        return [list(column) for column in self._table]

    @property
    def size(self) -> int:
        if not self._table:
            return 0
        return len(self._table[0])

    @property
    def column_count(self) -> int:
        return len(self._categories)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    def column_type(self, name: str) -> ColumnType | None:
        """Type tag of the named column, or None if it does not exist."""
        if name not in self._categories:
            return None
        return self._types[self._categories.index(name)]

    def get_column(self, name: str) -> list[Any]:
        """Copy of the named column, or an empty list for an unknown name."""
        if name == self._cached_name:
            return list(self._cached_column)

        if name not in self._categories:
            return []

        index = self._categories.index(name)
        self._cached_name = name
        self._cached_column = list(self._table[index])
        return list(self._cached_column)

    def remove_column(self, name: str) -> None:
        """Remove the named column and its metadata (no-op if unknown)."""
        if name not in self._categories:
            return

        index = self._categories.index(name)
        if name == self._cached_name:
            self._cached_name = None
            self._cached_column = []

        del self._table[index]
        del self._categories[index]
        del self._types[index]

    def split(self, row: int, data: Sequence[Sequence[Any]] | None = None) -> SplitResult:
        """Split rows into a training set and a test set.

        Args:
            row: Zero-based row index; rows 0..row go to train, the rest to test
            data: Optional column-major data to split instead of this table
                (e.g. normalized or z-scored output)

        Returns:
            SplitResult, empty when ``row`` is out of range
        """
        source = self._table if data is None else data
        n_rows = len(source[0]) if source else 0

        if row < 0 or row >= n_rows:
            return SplitResult()

        return SplitResult(
            train=[list(column[: row + 1]) for column in source],
            test=[list(column[row + 1 :]) for column in source],
        )

    # === Interop ===

    def to_dataframe(self) -> pd.DataFrame:
        """Copy of the table as a DataFrame."""
        return pd.DataFrame(
            {name: list(column) for name, column in zip(self._categories, self._table)},
            columns=self._categories,
        )

    def __repr__(self) -> str:
        return f"Table(columns={self._categories!r}, rows={self.size})"
