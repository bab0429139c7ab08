from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine
import logging
from .core.config import settings
from .db import models  # noqa: F401  registers tables on SQLModel.metadata

logger = logging.getLogger(__name__)

def make_engine(db_url: str, echo: bool = False) -> Engine:
    # Choose engine options based on database scheme
    engine_kwargs = {}

    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })

    return create_engine(db_url, echo=echo, **engine_kwargs)

engine = make_engine(settings.DATABASE_URL, echo=settings.DEBUG)

def create_db_and_tables(bind: Engine = None):
    SQLModel.metadata.create_all(bind or engine)
    logger.info("Database tables ensured")
