"""
Database session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from pointage.core.config import settings
from pointage.db.base import Base


def store_connect_args(database_url: str, timeout_seconds: float) -> dict:
    """Per-dialect connect args that bound how long a single store call may block."""
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout_seconds}
    if database_url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={int(timeout_seconds * 1000)}"}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=store_connect_args(settings.DATABASE_URL, settings.STORE_TIMEOUT_SECONDS),
    pool_pre_ping=True,
    echo=False
)

# Create all tables automatically on startup for SQLite
if "sqlite" in settings.DATABASE_URL:
    import pointage.models  # noqa: F401
    Base.metadata.create_all(bind=engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
