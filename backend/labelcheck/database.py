# Create Engine
# Make DB Session
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from labelcheck.core.config import settings


def build_engine(database_url: str) -> Engine:

    connect_args = {}
    engine_kwargs = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        # An in-memory database lives in a single connection that every session must share
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs = {"poolclass": StaticPool}

    db_engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)

    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    if db_engine.dialect.name == "sqlite":
        @event.listens_for(db_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return db_engine


# An Engine building a connection with DATABASE using DATABASE URL
engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def init_db(bind: Engine = engine) -> None:

    # Importing models registers every table on Base.metadata
    import labelcheck.models  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db():

    db = SessionLocal()

    try:
        yield db
    finally:
        db.close()
