"""Session factory and the request-scoped session dependency."""

from typing import Generator

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from learnhub.db.base import Base
from learnhub.db.engine import engine

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """Yield a session; anything left uncommitted after a DB error is rolled back."""
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine = engine) -> None:
    """Create missing tables. Outside dev/test the alembic revisions own the schema."""
    from learnhub import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
