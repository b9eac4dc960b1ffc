"""Engine construction and schema setup"""

from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

# Register tables on SQLModel.metadata
from pagemd.crud import models  # noqa: F401


def make_engine(db_url: str):
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            db_url, echo=False,
            connect_args={"check_same_thread": False}, poolclass=StaticPool,
        )
    if db_url.startswith("sqlite"):
        return create_engine(db_url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(db_url, echo=False)


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)


def reset_db(engine) -> None:
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
