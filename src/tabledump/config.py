"""Defaults and database configuration loading."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from tabledump.errors import ConfigError

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_OUTPUT_FILE = "output.csv"

# SQLAlchemy driver used when the config file names none
DEFAULT_DRIVER = "oracle+oracledb"

# Rows buffered between the query and the writer thread
PIPE_SIZE = 1000
# Seconds a producer waits on a full pipe before checking the writer is still alive
PUT_POLL_INTERVAL = 1.0

_REQUIRED_KEYS = ("dbhost", "dbname", "dbuser", "dbpass")


@dataclass
class DatabaseConfig:
    """Connection settings read from the config file.

    A full SQLAlchemy ``url`` takes precedence over the individual fields.
    """

    dbhost: str = ""
    dbname: str = ""
    dbuser: str = ""
    dbpass: str = ""
    driver: str = DEFAULT_DRIVER
    url_override: str | None = None

    def url(self) -> URL:
        if self.url_override:
            try:
                return make_url(self.url_override)
            except ArgumentError as e:
                raise ConfigError(f"Invalid database url: {e}") from e

        host, _, port = self.dbhost.partition(":")
        if self.driver.startswith("oracle"):
            # Oracle's //host/service form
            return URL.create(
                self.driver,
                username=self.dbuser,
                password=self.dbpass,
                host=host,
                port=int(port) if port else None,
                query={"service_name": self.dbname},
            )
        return URL.create(
            self.driver,
            username=self.dbuser,
            password=self.dbpass,
            host=host,
            port=int(port) if port else None,
            database=self.dbname,
        )


def load_config(path: Path) -> DatabaseConfig:
    """Read database settings from a TOML file."""
    if not path.exists():
        raise ConfigError(f"File {path} not found")

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    if "url" in data:
        return DatabaseConfig(url_override=str(data["url"]))

    missing = [key for key in _REQUIRED_KEYS if key not in data]
    if missing:
        raise ConfigError(f"Missing keys in {path}: {', '.join(missing)}")

    dbhost = str(data["dbhost"])
    _, _, port = dbhost.partition(":")
    if port and not port.isdigit():
        raise ConfigError(f"Invalid port in dbhost: {dbhost}")

    return DatabaseConfig(
        dbhost=dbhost,
        dbname=str(data["dbname"]),
        dbuser=str(data["dbuser"]),
        dbpass=str(data["dbpass"]),
        driver=str(data.get("driver", DEFAULT_DRIVER)),
    )
