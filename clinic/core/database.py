from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from fastapi import Request
from typing import Generator
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def _engine_options(url: str) -> dict:
    """Connection options for the given backend."""
    if url.startswith("sqlite"):
        # Request handlers run in a threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,  # Recycle connections after 30 minutes
        "pool_pre_ping": True,
    }


class Database:
    """Engine and session factory for the clinic's relational store.

    Built once at process start (see ``clinic.main``) and handed to whatever
    needs sessions; ``dispose`` releases the pool at shutdown.
    """

    def __init__(self, url: str):
        self.url = url
        self.engine = create_engine(url, **_engine_options(url))
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def init_db(self):
        """Create the users, appointments and medical_records tables."""
        # Register the mapped classes on Base.metadata
        from ..models import appointment, medical_record, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self):
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))

    def dispose(self):
        logger.info("Disposing database engine")
        self.engine.dispose()


# Database dependency
def get_db(request: Request) -> Generator[Session, None, None]:
    """Get a request-scoped database session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


# Redis dependency
def get_redis(request: Request):
    """Get Redis client."""
    return request.app.state.redis
