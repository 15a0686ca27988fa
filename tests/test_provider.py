"""Tests for the SQLAlchemy catalog and row provider against SQLite."""

import datetime
import io
from unittest.mock import MagicMock

import pytest
from sqlalchemy import quoted_name

from tabledump.db.provider import SqlAlchemyProvider, build_select
from tabledump.definition.builder import TableSelectionBuilder
from tabledump.definition.models import (
    BooleanValue,
    Clob,
    DateTime,
    DateTimeValue,
    DateValue,
    Float,
    Integer,
    Number,
    VarChar,
    Varchar,
)
from tabledump.errors import DatabaseError, DecodeError, UnknownColumn, UnknownDataType
from tabledump.export.pipeline import export_streaming
from tabledump.export.writer import CsvSink

ITEM_COLUMNS = ["ACTIVE", "ID", "LABEL", "NOTES", "PRICE", "SHIPPED", "UPDATED"]


def _items(provider):
    return TableSelectionBuilder("ITEMS").with_columns(ITEM_COLUMNS).build(provider)


# -- Catalog --


def test_query_columns(provider):
    catalog = {col.name: col for col in provider.query_columns("ORDERS")}

    assert set(catalog) == {"ID", "NAME", "CREATED"}
    assert catalog["ID"].nullable is False
    assert catalog["NAME"].nullable is True
    assert catalog["NAME"].native_type == "VARCHAR(40)"
    assert catalog["NAME"].length == 40
    assert catalog["CREATED"].native_type == "DATE"


def test_query_columns_numeric_precision(provider):
    catalog = {col.name: col for col in provider.query_columns("ITEMS")}

    assert catalog["PRICE"].length == 10
    assert catalog["PRICE"].precision == 10
    assert catalog["PRICE"].to_definition().kind == Number(10, 10)
    assert catalog["ID"].to_definition().kind == Number(0, 0)
    assert catalog["LABEL"].to_definition().kind == VarChar(20)
    assert catalog["NOTES"].to_definition().kind == Clob()
    assert catalog["UPDATED"].to_definition().kind == DateTime()


def test_query_columns_with_owner(provider):
    names = [col.name for col in provider.query_columns("ORDERS", "main")]
    assert sorted(names) == ["CREATED", "ID", "NAME"]


def test_query_columns_missing_table(provider):
    assert provider.query_columns("NOPE") == []


def test_build_unknown_column(provider):
    with pytest.raises(UnknownColumn) as exc_info:
        TableSelectionBuilder("ORDERS").with_columns(["ID", "TOTAL", "AMOUNT"]).build(provider)
    assert exc_info.value.name == "AMOUNT"


def test_build_unsupported_type(provider):
    with pytest.raises(UnknownDataType):
        TableSelectionBuilder("BLOBS").with_column("ID").build(provider)


# -- Rows --


def test_build_select_uses_canonical_order(provider):
    definition = TableSelectionBuilder("ORDERS").with_columns(["NAME", "ID"]).build(provider)
    sql = str(build_select(definition))
    assert sql.index("ID") < sql.index("NAME")
    assert "WHERE" not in sql


def test_query_rows_decodes_every_kind(provider):
    rows = _items(provider).load(provider).rows

    assert len(rows) == 3
    assert rows[0].values == (
        BooleanValue(True),
        Integer(1),
        Varchar("chair"),
        Varchar('wooden, with "arms"'),
        Float(12.5),
        DateValue(datetime.date(2024, 3, 1)),
        DateTimeValue(datetime.datetime(2024, 3, 1, 10, 30)),
    )
    assert rows[1].values == (None, Integer(2), None, None, None, None, None)


def test_query_rows_with_owner(provider):
    definition = TableSelectionBuilder("main.ORDERS").with_columns(["ID", "NAME"]).build(provider)
    rows = definition.load(provider).rows
    assert [row.values for row in rows] == [(Integer(5), Varchar("Bob"))]


def test_decode_error_aborts_retrieval(provider):
    definition = TableSelectionBuilder("BROKEN").with_column("ID").build(provider)
    with pytest.raises(DecodeError):
        definition.load(provider)


def test_query_error_is_wrapped(engine):
    provider = SqlAlchemyProvider(engine)
    definition = TableSelectionBuilder("ORDERS").with_column("ID").build(provider)
    with engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE ORDERS")

    with pytest.raises(DatabaseError) as exc_info:
        definition.load(provider)
    assert exc_info.value.__cause__ is not None


def test_streaming_export_orders(provider):
    definition = TableSelectionBuilder("ORDERS").with_columns(["NAME", "ID"]).build(provider)
    out = io.StringIO()

    rows = export_streaming(definition, provider, CsvSink(out))

    assert rows == 1
    assert out.getvalue() == "ID,NAME\n5,Bob\n"


def test_streaming_export_items(provider):
    out = io.StringIO()
    rows = export_streaming(_items(provider), provider, CsvSink(out))

    assert rows == 3
    assert out.getvalue().splitlines() == [
        "ACTIVE,ID,LABEL,NOTES,PRICE,SHIPPED,UPDATED",
        'true,1,chair,"wooden, with ""arms""",12.5,2024-03-01,2024-03-01 10:30:00',
        ",2,,,,,",
        "false,3,lamp,desk,7.25,2024-03-02,2024-03-02 08:00:05",
    ]


def test_streaming_decode_error_propagates(provider):
    definition = TableSelectionBuilder("BROKEN").with_column("ID").build(provider)
    out = io.StringIO()

    with pytest.raises(DecodeError):
        export_streaming(definition, provider, CsvSink(out))

    assert out.getvalue() == "ID\n1\n"


def test_declared_number_precision_decodes_as_float(provider):
    catalog = {col.name: col for col in provider.query_columns("MEASURES")}
    assert catalog["QTY"].to_definition().kind == Number(10, 10)
    assert catalog["AMOUNT"].to_definition().kind == Number(10, 10)
    assert catalog["TOTAL"].to_definition().kind == Number(0, 0)

    definition = (
        TableSelectionBuilder("MEASURES")
        .with_columns(["QTY", "AMOUNT", "TOTAL"])
        .build(provider)
    )
    rows = definition.load(provider).rows
    assert rows[0].values == (Float(7.5), Float(5.0), Integer(3))


def test_quoted_lower_case_names_are_not_denormalized():
    engine = MagicMock()
    engine.dialect.requires_name_normalize = True
    engine.dialect.denormalize_name.side_effect = str.upper
    provider = SqlAlchemyProvider(engine)

    assert provider._catalog_name(quoted_name("id", quote=True)) == "id"
    assert provider._catalog_name("id") == "ID"
