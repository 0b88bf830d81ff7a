"""Engine and session factory. SQLite for development, Postgres in deployment."""
from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from telemed.core.config import settings


def engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # A connection per checkout; FastAPI runs sync handlers on a thread pool
        return {"connect_args": {"check_same_thread": False}, "poolclass": NullPool}
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


def build_engine(url: str) -> Engine:
    return create_engine(url, **engine_options(url))


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
