"""Decode fetched rows into typed column values."""

import datetime
import math
from collections.abc import Mapping, Sequence
from decimal import Decimal

from tabledump.definition.models import (
    Boolean,
    BooleanValue,
    Clob,
    ColumnDefinition,
    ColumnValue,
    DataRow,
    Date,
    DateTime,
    DateTimeValue,
    DateValue,
    Float,
    Integer,
    Number,
    VarChar,
    Varchar,
)
from tabledump.errors import DecodeError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _decode_integer(column: ColumnDefinition, value) -> Integer:
    if isinstance(value, bool):
        raise DecodeError(column.name, value, "boolean is not a number")
    if isinstance(value, int):
        number = value
    elif isinstance(value, (float, Decimal)):
        if not math.isfinite(value):
            raise DecodeError(column.name, value, "not a finite number")
        number = int(value)
        if number != value:
            raise DecodeError(column.name, value, "fractional value in whole-number column")
    else:
        raise DecodeError(column.name, value, "expected a number")
    if not INT64_MIN <= number <= INT64_MAX:
        raise DecodeError(column.name, value, "out of 64-bit range")
    return Integer(number)


def _decode_float(column: ColumnDefinition, value) -> Float:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise DecodeError(column.name, value, "expected a number")
    return Float(float(value))


def _decode_boolean(column: ColumnDefinition, value) -> BooleanValue:
    if isinstance(value, bool):
        return BooleanValue(value)
    if isinstance(value, int) and value in (0, 1):
        return BooleanValue(bool(value))
    raise DecodeError(column.name, value, "expected a boolean")


def _decode_date(column: ColumnDefinition, value) -> DateValue:
    if isinstance(value, datetime.datetime):
        return DateValue(value.date())
    if isinstance(value, datetime.date):
        return DateValue(value)
    raise DecodeError(column.name, value, "expected a date")


def _decode_datetime(column: ColumnDefinition, value) -> DateTimeValue:
    if isinstance(value, datetime.datetime):
        return DateTimeValue(value)
    if isinstance(value, datetime.date):
        return DateTimeValue(datetime.datetime.combine(value, datetime.time()))
    raise DecodeError(column.name, value, "expected a timestamp")


def decode_value(column: ColumnDefinition, value) -> ColumnValue | None:
    """Decode one field according to its column's data kind. NULL stays None."""
    if value is None:
        return None

    kind = column.kind
    if isinstance(kind, (VarChar, Clob)):
        if not isinstance(value, str):
            raise DecodeError(column.name, value, "expected a string")
        return Varchar(value)
    if isinstance(kind, Number):
        if kind.precision > 0:
            return _decode_float(column, value)
        return _decode_integer(column, value)
    if isinstance(kind, Boolean):
        return _decode_boolean(column, value)
    if isinstance(kind, Date):
        return _decode_date(column, value)
    if isinstance(kind, DateTime):
        return _decode_datetime(column, value)

    raise DecodeError(column.name, value, f"unsupported data kind {kind!r}")


def decode_row(native_row: Sequence, columns: Mapping[str, ColumnDefinition]) -> DataRow:
    """Decode a fetched row whose fields follow the canonical column order."""
    if len(native_row) != len(columns):
        raise DecodeError(
            "<row>", tuple(native_row),
            f"expected {len(columns)} fields, got {len(native_row)}",
        )
    values = tuple(
        decode_value(column, value) for column, value in zip(columns.values(), native_row)
    )
    return DataRow(values=values, columns=columns)
