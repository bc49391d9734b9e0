"""Alembic environment: runs revisions against settings.DATABASE_URL."""

from alembic import context

from learnhub import models  # noqa: F401
from learnhub.db.base import Base
from learnhub.db.engine import create_db_engine

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    from learnhub.core.config import settings

    context.configure(
        url=settings.DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_db_engine()
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
