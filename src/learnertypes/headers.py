"""Column headers: the structure of tabular data, without its values.

Learner types treat headers opaquely and only inspect them through their
constraints. This module provides the concrete header model used by the
built-in taxonomy and the learner harness, based on polars dtypes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, overload

import polars as pl

from learnertypes.errors import HeaderMismatchError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

# Dtypes whose values are drawn from a finite set of labels
NOMINAL_DTYPES: tuple[type[pl.DataType], ...] = (pl.Categorical, pl.Enum, pl.Boolean, pl.String)


@dataclass(frozen=True)
class ColumnHeader:
    """The name and declared data kind of one column."""

    name: str
    dtype: pl.DataType
    nullable: bool = False

    @property
    def is_nominal(self) -> bool:
        """Whether the column holds categorical labels."""
        return self.dtype.base_type() in NOMINAL_DTYPES

    @property
    def is_numeric(self) -> bool:
        """Whether the column holds numbers."""
        return self.dtype.is_numeric()

    def __str__(self) -> str:
        suffix = "?" if self.nullable else ""
        return f"{self.name}: {self.dtype}{suffix}"


@dataclass(frozen=True)
class Headers(Sequence[ColumnHeader]):
    """An ordered, immutable sequence of column headers."""

    columns: tuple[ColumnHeader, ...] = ()

    @classmethod
    def of(cls, *columns: ColumnHeader) -> Headers:
        return cls(tuple(columns))

    @classmethod
    def from_schema(
        cls,
        schema: Mapping[str, pl.DataType],
        *,
        nullable: bool | Iterable[str] = False,
    ) -> Headers:
        """Build headers from a polars schema.

        Args:
            schema: Mapping of column name to dtype.
            nullable: Either a flag applied to every column, or the names
                of the columns which may contain missing values.

        """
        nullable_names = (
            set(schema) if nullable is True else set() if nullable is False else set(nullable)
        )
        return cls(
            tuple(
                ColumnHeader(name, dtype, name in nullable_names)
                for name, dtype in schema.items()
            )
        )

    @classmethod
    def from_frame(cls, frame: pl.DataFrame | pl.LazyFrame) -> Headers:
        """Build headers from a frame, marking columns which contain nulls."""
        null_counts = frame.null_count()
        if isinstance(null_counts, pl.LazyFrame):
            null_counts = null_counts.collect()
        counts = null_counts.row(0, named=True) if null_counts.height else {}
        return cls.from_schema(
            frame.collect_schema(),
            nullable=[name for name, count in counts.items() if count],
        )

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def select(self, names: Iterable[str]) -> Headers:
        """Get the headers of the named columns, in the order given.

        Raises:
            HeaderMismatchError: If a name is not one of these headers.

        """
        by_name = {column.name: column for column in self.columns}
        selected = []
        for name in names:
            if name not in by_name:
                msg = f"No column named '{name}' in headers {self.names}"
                raise HeaderMismatchError(msg)
            selected.append(by_name[name])
        return Headers(tuple(selected))

    def subset_indices(self, of: Headers) -> tuple[int, ...]:
        """Get the positions in ``of`` of each of these headers' columns.

        Raises:
            HeaderMismatchError: If a column is not in ``of``.

        """
        positions = {column.name: index for index, column in enumerate(of.columns)}
        missing = [name for name in self.names if name not in positions]
        if missing:
            msg = f"Columns {missing} are not in headers {of.names}"
            raise HeaderMismatchError(msg)
        return tuple(positions[name] for name in self.names)

    def has_equivalent_structure_to(self, other: Headers) -> bool:
        """Whether both have the same column names and dtypes, in order."""
        return len(self) == len(other) and all(
            mine.name == theirs.name and mine.dtype == theirs.dtype
            for mine, theirs in zip(self.columns, other.columns, strict=True)
        )

    @overload
    def __getitem__(self, index: int) -> ColumnHeader: ...
    @overload
    def __getitem__(self, index: slice) -> Headers: ...
    def __getitem__(self, index: int | slice) -> ColumnHeader | Headers:
        if isinstance(index, slice):
            return Headers(self.columns[index])
        return self.columns[index]

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[ColumnHeader]:
        return iter(self.columns)

    def __str__(self) -> str:
        return f"[{', '.join(map(str, self.columns))}]"


def headers_of(data: Headers | pl.DataFrame | pl.LazyFrame) -> Headers:
    """Get the headers of a frame, or return headers unchanged."""
    if isinstance(data, Headers):
        return data
    return Headers.from_frame(data)


def must_have_equivalent_structure(
    actual: Headers | pl.DataFrame | pl.LazyFrame, expected: Headers
) -> None:
    """Ensure ``actual`` has the same column structure as ``expected``.

    Raises:
        HeaderMismatchError: If the structures differ.

    """
    actual_headers = headers_of(actual)
    if not actual_headers.has_equivalent_structure_to(expected):
        msg = f"Column structure {actual_headers} does not match expected {expected}"
        raise HeaderMismatchError(msg)
