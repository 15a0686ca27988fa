"""Database engine creation."""

import logging

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError

from tabledump.config import DatabaseConfig
from tabledump.errors import DatabaseError

logger = logging.getLogger("tabledump")


def get_engine(config: DatabaseConfig) -> Engine:
    """Create an engine for the configured database. Does not connect yet."""
    url = config.url()
    logger.info("Using database %s", url.render_as_string(hide_password=True))
    try:
        return create_engine(url, pool_pre_ping=True)
    except (SQLAlchemyError, ImportError) as e:
        raise DatabaseError(f"Cannot create engine: {e}") from e


def check_connection(engine: Engine) -> None:
    """Open and close one connection so login problems surface early."""
    try:
        with engine.connect() as conn:
            if engine.dialect.name == "oracle":
                conn.execute(text("SELECT 1 FROM DUAL"))
            else:
                conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        raise DatabaseError(str(e)) from e
