"""Tests for configuration loading and engine creation."""

import pytest

from tabledump.config import DEFAULT_DRIVER, DatabaseConfig, load_config
from tabledump.db.connection import check_connection, get_engine
from tabledump.errors import ConfigError, DatabaseError


def _write(tmp_path, body):
    path = tmp_path / "config.toml"
    path.write_text(body)
    return path


def test_load_oracle_config(tmp_path):
    path = _write(tmp_path, """
dbhost = "dbserver:1521"
dbname = "orcl.world"
dbuser = "scott"
dbpass = "tiger"
""")
    config = load_config(path)
    assert config.driver == DEFAULT_DRIVER

    url = config.url()
    assert url.drivername == "oracle+oracledb"
    assert url.host == "dbserver"
    assert url.port == 1521
    assert url.username == "scott"
    assert url.password == "tiger"
    assert url.query["service_name"] == "orcl.world"
    assert "tiger" not in url.render_as_string(hide_password=True)


def test_other_driver_uses_database_name(tmp_path):
    path = _write(tmp_path, """
dbhost = "localhost"
dbname = "shop"
dbuser = "app"
dbpass = "secret"
driver = "postgresql+psycopg2"
""")
    url = load_config(path).url()
    assert url.database == "shop"
    assert url.port is None
    assert "service_name" not in url.query


def test_url_override(tmp_path):
    path = _write(tmp_path, 'url = "sqlite:///data.db"\n')
    url = load_config(path).url()
    assert url.drivername == "sqlite"
    assert url.database == "data.db"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.toml")


def test_invalid_toml(tmp_path):
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(_write(tmp_path, "dbhost = \n"))


def test_missing_keys(tmp_path):
    with pytest.raises(ConfigError, match="dbpass"):
        load_config(_write(tmp_path, 'dbhost = "h"\ndbname = "n"\ndbuser = "u"\n'))


def test_invalid_port(tmp_path):
    body = 'dbhost = "h:abc"\ndbname = "n"\ndbuser = "u"\ndbpass = "p"\n'
    with pytest.raises(ConfigError, match="port"):
        load_config(_write(tmp_path, body))


def test_invalid_url():
    with pytest.raises(ConfigError):
        DatabaseConfig(url_override="not a url").url()


def test_sqlite_engine_connects(db_path):
    engine = get_engine(DatabaseConfig(url_override=f"sqlite:///{db_path}"))
    check_connection(engine)
    engine.dispose()


def test_connection_failure(tmp_path):
    missing = tmp_path / "no" / "such" / "dir" / "db.sqlite"
    engine = get_engine(DatabaseConfig(url_override=f"sqlite:///{missing}"))
    with pytest.raises(DatabaseError):
        check_connection(engine)
