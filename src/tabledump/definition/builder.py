"""Builder that resolves a column selection against the live catalog."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from tabledump.definition.base import ColumnDataProvider
from tabledump.definition.models import TableDefinition
from tabledump.errors import UnknownColumn

logger = logging.getLogger("tabledump")


def split_table_name(table_name: str) -> tuple[str | None, str]:
    """Split ``owner.table`` on the first dot. Returns ``(owner, table)``."""
    if "." in table_name:
        owner, _, table = table_name.partition(".")
        logger.debug("Identified owner [%s] and table [%s]", owner, table)
        return owner, table
    return None, table_name


class TableSelectionBuilder:
    """Collects a table name and column names, then builds a ``TableDefinition``.

    Usage::

        definition = (
            TableSelectionBuilder("SCOTT.ORDERS")
            .with_column("ID")
            .with_column("NAME")
            .build(provider)
        )
    """

    def __init__(self, table_name: str) -> None:
        self.table_name = table_name
        self.column_names: set[str] = set()

    def with_column(self, column_name: str) -> TableSelectionBuilder:
        self.column_names.add(column_name)
        return self

    def with_columns(self, column_names: Iterable[str]) -> TableSelectionBuilder:
        self.column_names.update(column_names)
        return self

    def build(self, catalog: ColumnDataProvider) -> TableDefinition:
        """Validate the requested columns against the catalog.

        Raises ``UnknownColumn`` naming the lexicographically smallest column
        the table does not have, and ``UnknownDataType`` if the catalog
        reports a column type that cannot be exported.
        """
        owner, table = split_table_name(self.table_name)

        logger.info("Querying column data for table %s", self.table_name)
        discovered = [col.to_definition() for col in catalog.query_columns(table, owner)]

        if not discovered:
            logger.warning("Column query for %s returned no data", self.table_name)
        else:
            logger.debug("Column query returned %d columns", len(discovered))

        known = {col.name for col in discovered}
        unknown = self.column_names - known
        if unknown:
            raise UnknownColumn(min(unknown))

        selected = [col for col in discovered if col.name in self.column_names]
        logger.info("Resolved %d columns for table %s", len(selected), self.table_name)
        return TableDefinition.create(table, selected, owner=owner)
