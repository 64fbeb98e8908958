from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from contact_api.core.config import settings


def build_engine(database_url: str):
    """Create an engine with per-backend connection arguments."""
    url = make_url(database_url)
    backend = url.get_backend_name()
    connect_args = {}
    kwargs = {}
    if backend.startswith("postgresql"):
        connect_args["options"] = "-c timezone=utc"
        kwargs["pool_pre_ping"] = True
    elif backend == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, connect_args=connect_args, **kwargs)

    if backend == "sqlite":
        # ON DELETE CASCADE is ignored by SQLite unless enabled per connection
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
