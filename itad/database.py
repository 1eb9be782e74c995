"""
Engine and session factory.

The engine is built from ``DATABASE_URL`` at import time and rebuilt by
``configure_database()`` when the URL changes (the test suite points it at a
scratch database before the first session is opened).
"""
import os

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

DEFAULT_DATABASE_URL = "postgresql://localhost/itad_lifecycle"

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

Base = declarative_base()

engine = None
_engine_url = None


def database_url() -> str:
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def _sqlite_engine(url: str):
    sqlite_engine = create_engine(url, connect_args={"check_same_thread": False})

    # pysqlite defers BEGIN on its own and then mishandles SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(sqlite_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return sqlite_engine


def configure_database() -> None:
    global engine, _engine_url

    url = database_url()
    if engine is not None and url == _engine_url:
        return

    if make_url(url).get_backend_name() == "sqlite":
        engine = _sqlite_engine(url)
    else:
        engine = create_engine(url, pool_pre_ping=True)

    SessionLocal.configure(bind=engine)
    _engine_url = url


configure_database()
