"""Column, table and row models shared by the builder, decoder and pipeline."""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from tabledump.definition.base import DataRowProvider, StreamingRowProvider
    from tabledump.export.pipeline import RowPipe


# -- Data kinds (what a column holds) --


@dataclass(frozen=True)
class VarChar:
    max_length: int


@dataclass(frozen=True)
class Number:
    length: int
    precision: int


@dataclass(frozen=True)
class Boolean:
    pass


@dataclass(frozen=True)
class Date:
    pass


@dataclass(frozen=True)
class DateTime:
    pass


@dataclass(frozen=True)
class Clob:
    pass


DataKind = Union[VarChar, Number, Boolean, Date, DateTime, Clob]


@dataclass(frozen=True)
class ColumnDefinition:
    """A single table column as resolved from the catalog."""

    name: str
    nullable: bool
    kind: DataKind


@dataclass(frozen=True)
class TableDefinition:
    """The resolved set of columns to export from one table.

    ``columns`` iterates in ascending name order. That order is the canonical
    column order for the header, the row values and the CSV columns.
    """

    table_name: str
    columns: Mapping[str, ColumnDefinition]
    owner: str | None = None

    @classmethod
    def create(
        cls, table_name: str, columns: list[ColumnDefinition], owner: str | None = None
    ) -> TableDefinition:
        """Build a definition with its columns sorted into canonical order."""
        ordered = {col.name: col for col in sorted(columns, key=lambda c: c.name)}
        return cls(table_name=table_name, columns=MappingProxyType(ordered), owner=owner)

    @property
    def qualified_name(self) -> str:
        return f"{self.owner}.{self.table_name}" if self.owner else self.table_name

    def header(self) -> list[str]:
        """Column names in canonical order."""
        return list(self.columns)

    def load(self, provider: DataRowProvider) -> TableData:
        """Fetch every row of the table at once."""
        rows = provider.query_rows(self)
        return TableData(table_name=self.qualified_name, columns=self.columns, rows=rows)

    def load_threaded(self, pipe: RowPipe | None = None) -> StreamingTableData:
        """Prepare a streaming load whose rows arrive on a pipe."""
        from tabledump.export.pipeline import RowPipe

        return StreamingTableData(definition=self, pipe=pipe if pipe is not None else RowPipe())


# -- Column values (what a field holds) --


@dataclass(frozen=True)
class Varchar:
    value: str


@dataclass(frozen=True)
class Integer:
    value: int


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class BooleanValue:
    value: bool


@dataclass(frozen=True)
class DateValue:
    value: datetime.date


@dataclass(frozen=True)
class DateTimeValue:
    value: datetime.datetime


ColumnValue = Union[Varchar, Integer, Float, BooleanValue, DateValue, DateTimeValue]


@dataclass(frozen=True)
class DataRow:
    """One fetched row, values in canonical column order.

    ``columns`` is the table definition's own mapping, shared by every row of
    an export and never copied.
    """

    values: tuple[ColumnValue | None, ...]
    columns: Mapping[str, ColumnDefinition] = field(repr=False, compare=False)

    def header(self) -> list[str]:
        return list(self.columns)

    def __len__(self) -> int:
        return len(self.values)


# -- Stream indicators --


@dataclass(frozen=True)
class MoreToCome:
    row: DataRow


@dataclass(frozen=True)
class EndOfData:
    pass


@dataclass(frozen=True)
class Aborted:
    """Close signal sent when the producer failed mid-stream."""

    error: BaseException


RowIndicator = Union[MoreToCome, EndOfData, Aborted]


# -- Loaded data --


@dataclass
class TableData:
    """All rows of a table, fetched in one go."""

    table_name: str
    columns: Mapping[str, ColumnDefinition]
    rows: list[DataRow]

    def header(self) -> list[str]:
        return list(self.columns)


@dataclass
class StreamingTableData:
    """A table whose rows are delivered on a pipe while they are still loading."""

    definition: TableDefinition
    pipe: RowPipe

    @property
    def table_name(self) -> str:
        return self.definition.qualified_name

    @property
    def columns(self) -> Mapping[str, ColumnDefinition]:
        return self.definition.columns

    def header(self) -> list[str]:
        return self.definition.header()

    def execute(self, provider: StreamingRowProvider) -> None:
        """Run the query and push every row onto the pipe, then the sentinel."""
        provider.stream_rows(self.definition, self.pipe)
