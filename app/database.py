from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from urllib.parse import quote_plus
from app.config import settings


def build_database_url() -> str:
    if settings.database_url:
        return settings.database_url
    db_user = quote_plus(settings.db_user)
    db_password = quote_plus(settings.db_password)
    return f"postgresql://{db_user}:{db_password}@{settings.db_host}:{settings.db_port}/{settings.db_name}"


DATABASE_URL = build_database_url()


def make_engine(url: str):
    """Create an engine; SQLite URLs get a single shared connection."""
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

        # SQLite leaves foreign keys unenforced unless asked per connection
        @event.listens_for(sqlite_engine, "connect")
        def enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    # SSL connection arguments
    connect_args = {}
    if settings.db_ssl_mode != "disable":
        connect_args["sslmode"] = settings.db_ssl_mode

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=10,
        max_overflow=20,
        echo=False,
        connect_args=connect_args
    )


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
