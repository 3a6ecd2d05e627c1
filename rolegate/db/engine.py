from collections.abc import Generator

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, create_engine

from rolegate.core.settings import get_settings


def create_db_engine(database_url: str) -> Engine:
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        # Required for SQLite when sessions cross threads (worker threads, FastAPI).
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, echo=False, connect_args=connect_args)


engine = create_db_engine(get_settings().database_url)


def init_db(db_engine: Engine = engine) -> None:
    """Create the registry and profile tables if they do not exist."""
    # Registers the table models on SQLModel.metadata.
    import rolegate.models  # noqa: F401

    SQLModel.metadata.create_all(db_engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
