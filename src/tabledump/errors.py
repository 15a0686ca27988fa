"""Exception types raised while resolving and exporting a table."""


class TableDumpError(Exception):
    """Base class for all tabledump errors."""


class ConfigError(TableDumpError):
    """The configuration file is missing or invalid."""


class DatabaseError(TableDumpError):
    """A database driver call failed. The driver exception is the ``__cause__``."""


class DecodeError(DatabaseError):
    """A fetched field could not be decoded into its column's value type."""

    def __init__(self, column: str, value: object, reason: str = "") -> None:
        self.column = column
        self.value = value
        message = f"Cannot decode value {value!r} of column {column}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnknownDataType(TableDumpError):
    """The catalog reported a column type outside the supported set."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown data type: {name}")


class UnknownColumn(TableDumpError):
    """A requested column does not exist in the table."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown column: {name}")


class PipeClosedError(TableDumpError):
    """A row was pushed after the end of the stream was signalled."""


class ConsumerAborted(TableDumpError):
    """The writer thread died before the stream was fully drained."""
