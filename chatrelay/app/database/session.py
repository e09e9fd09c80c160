# chatrelay/app/database/session.py
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from chatrelay.app.config.settings import settings

logger = logging.getLogger(__name__)

connect_args = {}
engine_kwargs = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
    # an in-memory database lives as long as its single connection
    if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=connect_args,
    **engine_kwargs,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Check the store is reachable and create missing tables.

    Any connectivity failure here is fatal: the process exits instead of
    serving requests against a dead store.
    """
    # model modules register their tables on Base
    from chatrelay.app.models import user, message  # noqa: F401

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        Base.metadata.create_all(bind=engine)
    except OperationalError as e:
        logger.critical("Could not connect to the database: %s", e)
        raise SystemExit(1) from e
    logger.info("Connected to the database")
