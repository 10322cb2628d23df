from contextlib import contextmanager
from typing import Iterator

from sqlmodel import Session, SQLModel, create_engine

from beyond_mask.core.config import settings


def _build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        url,
        echo=settings.debug,
        pool_size=settings.db_pool_size,
        pool_pre_ping=True,
    )


engine = _build_engine(settings.database_url)


def init_db() -> None:
    import beyond_mask.models  # noqa: F401 - ensure models are registered
    SQLModel.metadata.create_all(engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Check a connection out of the pool for the duration of the block.

    The session is closed (and its connection returned to the pool) on every
    exit path. Transaction control is left to the caller.
    """
    with Session(engine) as session:
        yield session


def get_session():
    with session_scope() as session:
        yield session
