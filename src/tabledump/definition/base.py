"""Abstract interfaces the database layer implements for the exporter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabledump.definition.models import ColumnDefinition, DataRow, TableDefinition
from tabledump.definition.types import map_native_type

if TYPE_CHECKING:
    from tabledump.export.pipeline import RowPipe


@dataclass
class CatalogColumn:
    """A column as described by the database catalog."""

    name: str
    nullable: bool
    native_type: str
    length: int | None = None
    precision: int | None = None

    def to_definition(self) -> ColumnDefinition:
        """Resolve the column's data kind. Raises ``UnknownDataType``."""
        kind = map_native_type(self.native_type, self.length, self.precision)
        return ColumnDefinition(name=self.name, nullable=self.nullable, kind=kind)


class ColumnDataProvider(ABC):
    """Reads column metadata from the database catalog."""

    @abstractmethod
    def query_columns(self, table_name: str, owner: str | None = None) -> list[CatalogColumn]:
        """Return every column of a table, or an empty list if none are visible."""


class DataRowProvider(ABC):
    """Fetches all rows of a table in one call."""

    @abstractmethod
    def query_rows(self, definition: TableDefinition) -> list[DataRow]:
        """Select the definition's columns from its table and decode every row."""


class StreamingRowProvider(ABC):
    """Pushes rows onto a pipe as they are fetched."""

    @abstractmethod
    def stream_rows(self, definition: TableDefinition, pipe: RowPipe) -> None:
        """Push each decoded row onto *pipe*, then finish it exactly once.

        On error the exception propagates and the pipe is left open.
        """
