"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import SQLModel

from pagemd.core.models import BlockNode, BlockType, PageProperties, RichTextRun
from pagemd.crud.database import init_db, make_engine
from pagemd.crud.pages import SQLPageStore


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="store")
def store_fixture(engine):
    return SQLPageStore(engine, base_url="https://pages.test/")


@pytest.fixture(name="props")
def props_fixture():
    return PageProperties(
        id="hello", title="Hello", status="Published", type="Post",
        tags=["x", "y"], date="2024-01-10", slug="hello-world",
        extra={"author": "Ann"},
    )


@pytest.fixture(name="blocks")
def blocks_fixture():
    return [
        BlockNode(id="hello", type=BlockType.unknown, child_ids=["b1", "b2"]),
        BlockNode(id="b1", type=BlockType.heading1, runs=[RichTextRun(text="Hi")]),
        BlockNode(id="b2", type=BlockType.code, language="py", runs=[RichTextRun(text="x = 1")]),
    ]
