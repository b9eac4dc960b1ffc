"""Contracts for the external document service"""

from typing import Any, Optional, Protocol

from pagemd.core.models import BlockNode, PageProperties, PageWriteResult


class PageSource(Protocol):
    """Read side: page listing and block retrieval.

    `list_page_metadata` may raise UnavailableError; `fetch_block_tree` may
    raise NotFoundError or UnavailableError.
    """

    def list_page_metadata(self, scope: Optional[dict[str, Any]] = None) -> list[PageProperties]:
        pass

    def fetch_block_tree(self, page_id: str) -> list[BlockNode]:
        pass


class PageSink(Protocol):
    """Write side: may raise RemoteRejectedError or UnavailableError."""

    def create_or_update_page(self, properties: PageProperties, blocks: list[BlockNode]) -> PageWriteResult:
        pass
