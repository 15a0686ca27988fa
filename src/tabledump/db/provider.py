"""SQLAlchemy implementation of the catalog and row providers."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Engine,
    Integer,
    Numeric,
    Select,
    String,
    Text,
    column,
    inspect,
    quoted_name,
    select,
    table,
)
from sqlalchemy.exc import CompileError, NoSuchTableError, SQLAlchemyError
from sqlalchemy.types import TypeEngine

from tabledump.definition import models
from tabledump.definition.base import (
    CatalogColumn,
    ColumnDataProvider,
    DataRowProvider,
    StreamingRowProvider,
)
from tabledump.definition.decoder import decode_row
from tabledump.definition.models import DataKind, DataRow, TableDefinition
from tabledump.errors import DatabaseError
from tabledump.export.pipeline import RowPipe

logger = logging.getLogger("tabledump")


def _select_type(kind: DataKind) -> TypeEngine:
    """SQLAlchemy type that makes the driver hand back values of the right Python type."""
    if isinstance(kind, models.VarChar):
        return String()
    if isinstance(kind, models.Clob):
        return Text()
    if isinstance(kind, models.Number):
        return Numeric(asdecimal=False) if kind.precision > 0 else Integer()
    if isinstance(kind, models.Boolean):
        return Boolean()
    if isinstance(kind, models.Date):
        return Date()
    if isinstance(kind, models.DateTime):
        return DateTime()
    raise TypeError(f"No select type for {kind!r}")


def build_select(definition: TableDefinition) -> Select:
    """``SELECT <columns in canonical order> FROM <table>``, no predicate."""
    columns = [column(col.name, _select_type(col.kind)) for col in definition.columns.values()]
    source = table(definition.table_name, *columns, schema=definition.owner)
    return select(*columns).select_from(source)


class SqlAlchemyProvider(ColumnDataProvider, DataRowProvider, StreamingRowProvider):
    """Reads the catalog and table rows through a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _native_type_name(self, col_type: TypeEngine) -> str:
        try:
            return col_type.compile(dialect=self.engine.dialect)
        except CompileError:
            return col_type.__visit_name__

    def _catalog_name(self, name: str) -> str:
        # Oracle reflects case-insensitive names in lower case, quoted ones as quoted_name
        if isinstance(name, quoted_name) and name.quote:
            return name
        dialect = self.engine.dialect
        if dialect.requires_name_normalize:
            return dialect.denormalize_name(name)
        return name

    def query_columns(self, table_name: str, owner: str | None = None) -> list[CatalogColumn]:
        logger.debug("Reading catalog for table [%s], owner [%s]", table_name, owner)
        try:
            reflected = inspect(self.engine).get_columns(table_name, schema=owner)
        except NoSuchTableError:
            logger.debug("Catalog has no table [%s]", table_name)
            return []
        except SQLAlchemyError as e:
            raise DatabaseError(f"Catalog query failed: {e}") from e

        columns: list[CatalogColumn] = []
        for info in reflected:
            col_type = info["type"]
            length = getattr(col_type, "length", None)
            if length is None:
                length = getattr(col_type, "precision", None)
            columns.append(CatalogColumn(
                name=self._catalog_name(info["name"]),
                nullable=bool(info.get("nullable", True)),
                native_type=self._native_type_name(col_type),
                length=length,
                precision=getattr(col_type, "precision", None),
            ))
            logger.debug("Catalog column %s", columns[-1])

        return columns

    def _iter_rows(self, definition: TableDefinition) -> Iterator[DataRow]:
        stmt = build_select(definition)
        logger.debug("Attempting query: %s", stmt)
        try:
            with self.engine.connect() as conn:
                for native_row in conn.execute(stmt):
                    yield decode_row(native_row, definition.columns)
        except (SQLAlchemyError, ValueError) as e:
            raise DatabaseError(f"Query on {definition.qualified_name} failed: {e}") from e

    def query_rows(self, definition: TableDefinition) -> list[DataRow]:
        rows = list(self._iter_rows(definition))
        logger.info("Fetched %d rows from %s", len(rows), definition.qualified_name)
        return rows

    def stream_rows(self, definition: TableDefinition, pipe: RowPipe) -> None:
        count = 0
        for row in self._iter_rows(definition):
            pipe.push(row)
            count += 1
        logger.info("Pushed %d rows from %s", count, definition.qualified_name)
        pipe.finish()
