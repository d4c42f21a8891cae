from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from vocab_scheduler.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless enabled per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: str, **kwargs):
    """Create an engine; SQLite connections are shared across threads and enforce foreign keys"""
    connect_args = {}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, connect_args=connect_args, **kwargs)
    if is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(bind):
    # Keep loaded attributes after commit so records can be returned detached
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = make_engine(settings.database_url)
SessionLocal = make_session_factory(engine)

Base = declarative_base()


def init_db(bind=None):
    """Create all tables"""
    # Register models on Base.metadata
    import vocab_scheduler.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
