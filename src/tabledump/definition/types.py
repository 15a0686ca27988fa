"""Translate catalog column types into data kinds."""

import re

from tabledump.definition.models import (
    Boolean,
    Clob,
    DataKind,
    Date,
    DateTime,
    Number,
    VarChar,
)
from tabledump.errors import UnknownDataType

NUMBER_TYPES = {"NUMBER", "NUMERIC", "DECIMAL", "INTEGER", "INT", "BIGINT", "SMALLINT"}
VARCHAR_TYPES = {"VARCHAR2", "VARCHAR", "NVARCHAR2", "NVARCHAR"}
CLOB_TYPES = {"CLOB", "NCLOB", "TEXT"}
DATE_TYPES = {"DATE"}
DATETIME_TYPES = {"TIMESTAMP", "DATETIME"}
BOOLEAN_TYPES = {"BOOL", "BOOLEAN"}

# Size and fractional-second modifiers, e.g. VARCHAR(40) or TIMESTAMP(6)
_MODIFIER_RE = re.compile(r"\([^)]*\)")


def normalize_type_name(native_type: str) -> str:
    """Upper-case a native type name and drop its parenthesised modifiers."""
    return _MODIFIER_RE.sub("", native_type).strip().upper()


def map_native_type(native_type: str, length: int | None, precision: int | None) -> DataKind:
    """Return the data kind for a native column type.

    *precision* is the number of digits after the decimal point; absent or
    zero means the column holds whole numbers.
    """
    name = normalize_type_name(native_type)

    if name in NUMBER_TYPES:
        return Number(length or 0, precision or 0)
    if name in VARCHAR_TYPES:
        return VarChar(length or 0)
    if name in CLOB_TYPES:
        return Clob()
    if name in DATE_TYPES:
        return Date()
    if name in DATETIME_TYPES:
        return DateTime()
    if name in BOOLEAN_TYPES:
        return Boolean()

    raise UnknownDataType(native_type)
