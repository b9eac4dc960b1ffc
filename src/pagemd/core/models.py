"""Data models for pages, blocks, filters, validation and batch results"""

import logging
from enum import Enum
from typing import Any, Iterator, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


logger = logging.getLogger(__name__)


class Annotations(BaseModel):
    """Independent inline formatting flags; any combination is allowed."""
    bold: bool = False
    italic: bool = False
    code: bool = False
    strikethrough: bool = False


class RichTextRun(BaseModel):
    """A span of text carrying formatting annotations and an optional link."""
    text: str
    annotations: Annotations = Field(default_factory=Annotations)
    link_url: Optional[str] = None


def plain_text(runs: list[RichTextRun]) -> str:
    """Concatenate run text, dropping all formatting."""
    return "".join(r.text for r in runs)


class BlockType(str, Enum):
    """Closed set of block kinds; anything unrecognised is `unknown`."""
    paragraph = "paragraph"
    heading1 = "heading1"
    heading2 = "heading2"
    heading3 = "heading3"
    bullet_item = "bulletItem"
    number_item = "numberItem"
    quote = "quote"
    code = "code"
    divider = "divider"
    image = "image"
    unknown = "unknown"


class BlockNode(BaseModel):
    """One structural unit of a document; children are referenced by id, in order."""
    id: str
    type: BlockType = BlockType.paragraph
    runs: list[RichTextRun] = Field(default_factory=list)
    language: Optional[str] = None          # code blocks only
    image_url: Optional[str] = None         # image blocks only
    caption: list[RichTextRun] = Field(default_factory=list)
    child_ids: list[str] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_unknown(cls, value: Any) -> Any:
        if isinstance(value, BlockType):
            return value
        try:
            return BlockType(value)
        except ValueError:
            return BlockType.unknown


class PageProperties(BaseModel):
    """Page metadata. `None` means absent, which is not the same as empty."""
    id: str
    title: str
    type: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    date: Optional[str] = None              # ISO date
    updated_date: Optional[str] = None      # ISO date
    slug: Optional[str] = None
    summary: Optional[str] = None
    extra: dict[str, Any] = Field(default_factory=dict)


class Document(BaseModel):
    """A page's properties paired with its block tree (root id == page id)."""
    properties: PageProperties
    blocks: dict[str, BlockNode] = Field(default_factory=dict)

    @property
    def root(self) -> BlockNode:
        return self.blocks[self.properties.id]

    @classmethod
    def build(cls, properties: PageProperties, nodes: list[BlockNode]) -> "Document":
        """Index nodes by id, synthesizing a root from unreferenced nodes if none is present."""
        blocks = {n.id: n for n in nodes}
        if properties.id not in blocks:
            referenced = {c for n in nodes for c in n.child_ids}
            top = [n.id for n in nodes if n.id not in referenced]
            blocks[properties.id] = BlockNode(id=properties.id, type=BlockType.unknown, child_ids=top)
        return cls(properties=properties, blocks=blocks)

    @classmethod
    def from_flat(cls, properties: PageProperties, nodes: list[BlockNode]) -> "Document":
        """Build a document whose root owns `nodes` directly, in order."""
        root = BlockNode(id=properties.id, type=BlockType.unknown, child_ids=[n.id for n in nodes])
        return cls.build(properties, [root, *nodes])

    def walk(self) -> Iterator[BlockNode]:
        """Yield descendants of the root depth-first in child order."""
        root = self.blocks.get(self.properties.id)
        if root is None:
            return
        seen = {root.id}
        stack = list(reversed(root.child_ids))
        while stack:
            block_id = stack.pop()
            if block_id in seen:
                continue
            seen.add(block_id)
            node = self.blocks.get(block_id)
            if node is None:
                logger.warning("Skipping missing child block", extra={"block_id": block_id})
                continue
            yield node
            stack.extend(reversed(node.child_ids))


class DateRange(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None


class FilterCriteria(BaseModel):
    """Conjunctive filter; absent (or empty) fields impose no constraint."""
    status: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    date_range: Optional[DateRange] = None
    keyword: Optional[str] = None


class ValidationOutcome(BaseModel):
    file_name: str
    valid: bool
    issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)   # unsupported constructs; never affect `valid`
    parsed_properties: dict[str, Any] = Field(default_factory=dict)
    parsed_content_length: int = 0


class ValidationReport(BaseModel):
    total_files: int
    valid_files: int
    invalid_files: int
    results: list[ValidationOutcome]


class SourceFile(BaseModel):
    """A Markdown document submitted for import."""
    file_name: str
    content: str


class PageWriteResult(BaseModel):
    page_id: str
    url: str


class ExportedPage(BaseModel):
    page_id: str
    title: str
    slug: str
    file_name: str
    markdown: str
    word_count: int


class ImportedPage(BaseModel):
    file_name: str
    page_id: str
    url: str
    title: str
    block_count: int


class ItemError(BaseModel):
    item_id: str
    message: str
    kind: str = "error"


class BatchState(str, Enum):
    pending = "pending"
    running = "running"
    completed = "completed"


class BatchResult(BaseModel):
    """Final tally of a batch; results are in input order."""
    total: int
    succeeded: int
    failed: int
    per_item_results: list[Any] = Field(default_factory=list)
    per_item_errors: list[ItemError] = Field(default_factory=list)
    batch_errors: list[ItemError] = Field(default_factory=list)    # e.g. a failed listing; not counted as items
    state: BatchState = BatchState.completed

    @model_validator(mode="after")
    def _check_tally(self) -> "BatchResult":
        if self.succeeded + self.failed != self.total:
            raise ValueError(
                f"succeeded ({self.succeeded}) + failed ({self.failed}) != total ({self.total})"
            )
        return self
