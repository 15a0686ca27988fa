"""CSV output for exported rows."""

import csv
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from tabledump.definition.models import (
    BooleanValue,
    ColumnValue,
    DataRow,
    DateTimeValue,
    DateValue,
    Float,
)

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_float(number: float) -> str:
    """Shortest round-trip form, exponent without sign padding (``1e16``, ``1e-7``)."""
    text = repr(number)
    mantissa, sep, exponent = text.partition("e")
    if not sep:
        return text
    return f"{mantissa}e{int(exponent)}"


def format_value(value: ColumnValue | None) -> str:
    """Render a column value as a CSV field. NULL becomes an empty field."""
    if value is None:
        return ""
    if isinstance(value, BooleanValue):
        return "true" if value.value else "false"
    if isinstance(value, DateTimeValue):
        return value.value.strftime(DATETIME_FORMAT)
    if isinstance(value, DateValue):
        return value.value.strftime(DATE_FORMAT)
    if isinstance(value, Float):
        return format_float(value.value)
    return str(value.value)


class CsvSink:
    """Writes a header and data rows to an open text stream."""

    def __init__(self, stream: TextIO, quote_all: bool = False) -> None:
        self._stream = stream
        self._writer = csv.writer(
            stream,
            quoting=csv.QUOTE_ALL if quote_all else csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )

    @classmethod
    def open(cls, path: Path, quote_all: bool = False, force: bool = False) -> "CsvSink":
        """Create the output file. Raises ``FileExistsError`` unless *force* is set."""
        mode = "w" if force else "x"
        return cls(open(path, mode, newline="", encoding="utf-8"), quote_all=quote_all)

    def write_header(self, names: Sequence[str]) -> None:
        self._writer.writerow(names)

    def write_row(self, row: DataRow) -> None:
        self._writer.writerow([format_value(v) for v in row.values])

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "CsvSink":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
