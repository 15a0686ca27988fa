"""Shared fixtures: a temporary SQLite database with a few tables."""

import pytest
from sqlalchemy import create_engine, text

from tabledump.db.provider import SqlAlchemyProvider

SCHEMA = [
    "CREATE TABLE ORDERS (ID INTEGER NOT NULL, NAME VARCHAR(40), CREATED DATE)",
    "INSERT INTO ORDERS (ID, NAME, CREATED) VALUES (5, 'Bob', NULL)",
    """CREATE TABLE ITEMS (
        ID INTEGER NOT NULL,
        LABEL VARCHAR(20),
        PRICE NUMERIC(10, 2),
        ACTIVE BOOLEAN,
        NOTES CLOB,
        SHIPPED DATE,
        UPDATED TIMESTAMP
    )""",
    """INSERT INTO ITEMS VALUES
        (1, 'chair', 12.5, 1, 'wooden, with "arms"', '2024-03-01', '2024-03-01 10:30:00')""",
    "INSERT INTO ITEMS VALUES (2, NULL, NULL, NULL, NULL, NULL, NULL)",
    "INSERT INTO ITEMS VALUES (3, 'lamp', 7.25, 0, 'desk', '2024-03-02', '2024-03-02 08:00:05')",
    "CREATE TABLE BROKEN (ID INTEGER)",
    "INSERT INTO BROKEN (ID) VALUES (1)",
    "INSERT INTO BROKEN (ID) VALUES ('abc')",
    "CREATE TABLE BLOBS (ID INTEGER, DATA BLOB)",
    "CREATE TABLE MEASURES (ID INTEGER NOT NULL, QTY NUMERIC(10, 0), AMOUNT NUMERIC(10, 2), TOTAL NUMERIC)",
    "INSERT INTO MEASURES VALUES (1, 5, 7.5, 3)",
]


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        for statement in SCHEMA:
            conn.execute(text(statement))
    engine.dispose()
    return path


@pytest.fixture
def engine(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    yield engine
    engine.dispose()


@pytest.fixture
def provider(engine):
    return SqlAlchemyProvider(engine)
