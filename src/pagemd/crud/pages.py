"""SQL-backed page store implementing the document-service contracts"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from pagemd.core.errors import NotFoundError, RemoteRejectedError, UnavailableError
from pagemd.core.models import BlockNode, PageProperties, PageWriteResult
from pagemd.crud.models import Block, Page


logger = logging.getLogger(__name__)

SCOPE_COLUMNS = {"status", "type", "category", "slug"}
PROPERTY_FIELDS = ("title", "type", "status", "category", "tags", "date", "updated_date", "slug", "summary")


def page_to_properties(page: Page) -> PageProperties:
    return PageProperties(
        id=page.id,
        extra=page.extra or {},
        **{name: getattr(page, name) for name in PROPERTY_FIELDS},
    )


def block_to_node(block: Block) -> BlockNode:
    return BlockNode(
        id=block.id,
        type=block.type,
        runs=block.runs or [],
        language=block.language,
        image_url=block.image_url,
        caption=block.caption or [],
        child_ids=block.child_ids or [],
    )


def node_to_block(node: BlockNode, page_id: str, position: int) -> Block:
    return Block(
        id=node.id,
        page_id=page_id,
        position=position,
        type=node.type.value,
        runs=[r.model_dump() for r in node.runs],
        language=node.language,
        image_url=node.image_url,
        caption=[r.model_dump() for r in node.caption],
        child_ids=list(node.child_ids),
    )


class SQLPageStore:
    """PageSource and PageSink over a SQLModel engine; one session per call."""

    def __init__(self, engine, base_url: str = "pagemd://pages"):
        self.engine = engine
        self.base_url = base_url.rstrip("/")

    def list_page_metadata(self, scope: Optional[dict[str, Any]] = None) -> list[PageProperties]:
        """Return page metadata, optionally narrowed by exact-match column values in scope."""
        stmt = select(Page)
        for key, value in (scope or {}).items():
            if key not in SCOPE_COLUMNS:
                logger.warning("Ignoring unknown listing scope key", extra={"scope_key": key})
                continue
            stmt = stmt.where(getattr(Page, key) == value)
        stmt = stmt.order_by(Page.created_at, Page.id)
        try:
            with Session(self.engine) as session:
                return [page_to_properties(p) for p in session.exec(stmt).all()]
        except SQLAlchemyError as e:
            raise UnavailableError(f"Page listing failed: {e}") from e

    def fetch_block_tree(self, page_id: str) -> list[BlockNode]:
        """Return every block of a page in storage order."""
        try:
            with Session(self.engine) as session:
                if session.get(Page, page_id) is None:
                    raise NotFoundError(page_id)
                rows = session.exec(
                    select(Block).where(Block.page_id == page_id).order_by(Block.position)
                ).all()
                return [block_to_node(b) for b in rows]
        except SQLAlchemyError as e:
            raise UnavailableError(f"Block retrieval failed for {page_id}: {e}") from e

    def _replace_blocks(self, session: Session, page_id: str, blocks: list[BlockNode]) -> None:
        for row in session.exec(select(Block).where(Block.page_id == page_id)).all():
            session.delete(row)
        session.flush()
        for position, node in enumerate(blocks):
            session.add(node_to_block(node, page_id, position))

    def create_or_update_page(self, properties: PageProperties, blocks: list[BlockNode]) -> PageWriteResult:
        """Upsert a page by id and replace its blocks."""
        if not properties.title:
            raise RemoteRejectedError(f"Page {properties.id} rejected: title is required")
        ids = [b.id for b in blocks]
        if len(ids) != len(set(ids)):
            raise RemoteRejectedError(f"Page {properties.id} rejected: duplicate block ids")

        values = {name: getattr(properties, name) for name in PROPERTY_FIELDS}
        values["extra"] = properties.extra or None
        try:
            with Session(self.engine) as session:
                page = session.get(Page, properties.id)
                if page is None:
                    page = Page(id=properties.id, **values)
                    status = "created"
                else:
                    for name, value in values.items():
                        setattr(page, name, value)
                    page.updated_at = datetime.now()
                    status = "updated"
                session.add(page)
                session.flush()
                self._replace_blocks(session, page.id, blocks)
                session.commit()
        except SQLAlchemyError as e:
            raise UnavailableError(f"Page write failed for {properties.id}: {e}") from e

        logger.info("Page written", extra={"page_id": properties.id, "status": status, "block_count": len(blocks)})
        return PageWriteResult(page_id=properties.id, url=f"{self.base_url}/{properties.slug or properties.id}")
