# app/db/engine.py

from functools import lru_cache

from sqlalchemy import Table, create_engine, event
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine

from app.config import get_settings


def create_store_engine(url: str, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL. Pooling is left to SQLAlchemy / the
    driver; callers open one short-lived connection per operation.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints on a thread pool
        connect_args["check_same_thread"] = False

    engine = create_engine(url, echo=echo, future=True, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _configure_connection(dbapi_conn, connection_record):
            # SQLite ignores foreign keys (and ON DELETE CASCADE) unless asked per connection
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            # pysqlite defers BEGIN until the first write; emit it ourselves instead
            dbapi_conn.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_transaction(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def upsert_insert(engine: Engine, table: Table):
    """INSERT construct that supports ``on_conflict_do_update`` for this engine."""
    if engine.dialect.name == "sqlite":
        return sqlite_insert(table)
    if engine.dialect.name == "postgresql":
        return postgresql_insert(table)
    raise NotImplementedError(f"Upsert is not supported on {engine.dialect.name}")


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    settings = get_settings()
    return create_store_engine(settings.database_url, echo=settings.sql_echo)
