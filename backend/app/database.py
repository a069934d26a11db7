"""Database connection and session management."""
from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from app.config import settings

if settings.database_url.startswith("sqlite"):
    # Local runs and tests: one shared connection so in-memory data survives across sessions
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif "pooler.supabase.com" in settings.database_url or settings.database_url.endswith(":6543"):
    # Use NullPool for pooler connections (recommended by Supabase)
    engine = create_engine(
        settings.database_url,
        poolclass=NullPool,
        echo=settings.environment == "development",
    )
else:
    # Direct connection for stationary servers
    engine = create_engine(
        settings.database_url,
        pool_size=20,
        max_overflow=10,
        echo=settings.environment == "development",
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
