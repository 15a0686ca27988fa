"""Table, column and data type definitions."""

from tabledump.definition.base import (
    CatalogColumn,
    ColumnDataProvider,
    DataRowProvider,
    StreamingRowProvider,
)
from tabledump.definition.builder import TableSelectionBuilder
from tabledump.definition.decoder import decode_row
from tabledump.definition.models import (
    ColumnDefinition,
    DataRow,
    EndOfData,
    MoreToCome,
    RowIndicator,
    TableData,
    TableDefinition,
)
from tabledump.definition.types import map_native_type

__all__ = [
    "CatalogColumn", "ColumnDataProvider", "ColumnDefinition", "DataRow",
    "DataRowProvider", "EndOfData", "MoreToCome", "RowIndicator",
    "StreamingRowProvider", "TableData", "TableDefinition",
    "TableSelectionBuilder", "decode_row", "map_native_type",
]
