"""Block node <-> Markdown block mapping"""

import re
from typing import Callable, Optional
from uuid import uuid4

from pagemd.core.models import BlockNode, BlockType, RichTextRun, plain_text
from pagemd.core.richtext import decode_inline, encode_runs


ImageHook = Callable[[str], str]

FENCE = "```"
HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
BULLET_RE = re.compile(r"^[-*]\s+(.*)$")
NUMBER_RE = re.compile(r"^\d+\.\s+(.*)$")
QUOTE_RE = re.compile(r"^>\s?(.*)$")
DIVIDERS = {"---", "***"}
IMAGE_RE = re.compile(r"^!\[(?P<caption>[^\]]*)\]\((?P<url>[^)\s]*)\)$")

HEADING_PREFIX: dict[BlockType, str] = {
    BlockType.heading1: "#",
    BlockType.heading2: "##",
    BlockType.heading3: "###",
}
LINE_PREFIX: dict[BlockType, str] = {
    BlockType.bullet_item: "-",
    BlockType.number_item: "1.",
    BlockType.quote: ">",
}
HEADING_TYPES = (BlockType.heading1, BlockType.heading2, BlockType.heading3)


def block_to_markdown(node: BlockNode, image_hook: Optional[ImageHook] = None) -> str:
    """Render one block as a single Markdown construct (no trailing newline)."""
    t = node.type
    if t in HEADING_PREFIX:
        return f"{HEADING_PREFIX[t]} {encode_runs(node.runs)}"
    if t in LINE_PREFIX:
        return f"{LINE_PREFIX[t]} {encode_runs(node.runs)}"
    if t == BlockType.code:
        return f"{FENCE}{node.language or ''}\n{plain_text(node.runs)}\n{FENCE}"
    if t == BlockType.divider:
        return "---"
    if t == BlockType.image:
        if not node.image_url:
            return ""
        url = image_hook(node.image_url) if image_hook else node.image_url
        return f"![{plain_text(node.caption)}]({url})"
    if t == BlockType.unknown:
        return plain_text(node.runs)
    return encode_runs(node.runs)


def _new_id() -> str:
    return uuid4().hex


class BlockParser:
    """Line-oriented Markdown block classifier.

    An open code fence is the only state spanning lines and takes priority over
    every other classification until its closing fence. Blank lines separate
    blocks and produce nothing.
    """

    def __init__(self, id_factory: Callable[[], str] = _new_id):
        self._id = id_factory
        self._in_code = False
        self._language: Optional[str] = None
        self._code_lines: list[str] = []

    def _node(self, type_: BlockType, runs: list[RichTextRun] = None, **fields) -> BlockNode:
        return BlockNode(id=self._id(), type=type_, runs=runs or [], **fields)

    def _close_code(self) -> BlockNode:
        node = self._node(
            BlockType.code,
            [RichTextRun(text="\n".join(self._code_lines))],
            language=self._language,
        )
        self._in_code = False
        self._language = None
        self._code_lines = []
        return node

    def feed(self, line: str) -> list[BlockNode]:
        """Classify one line; returns the blocks it completes (zero or one)."""
        stripped = line.strip()

        if stripped.startswith(FENCE):
            if self._in_code:
                return [self._close_code()]
            self._in_code = True
            self._language = stripped[len(FENCE):].strip() or None
            return []
        if self._in_code:
            self._code_lines.append(line)
            return []

        if not stripped:
            return []
        if m := HEADING_RE.match(stripped):
            level = min(len(m.group(1)), 3)
            return [self._node(HEADING_TYPES[level - 1], decode_inline(m.group(2).strip()))]
        if stripped not in DIVIDERS:
            if m := BULLET_RE.match(stripped):
                return [self._node(BlockType.bullet_item, decode_inline(m.group(1)))]
            if m := NUMBER_RE.match(stripped):
                return [self._node(BlockType.number_item, decode_inline(m.group(1)))]
        if m := QUOTE_RE.match(stripped):
            return [self._node(BlockType.quote, decode_inline(m.group(1)))]
        if stripped in DIVIDERS:
            return [self._node(BlockType.divider)]
        if m := IMAGE_RE.match(stripped):
            caption = m.group("caption")
            return [self._node(
                BlockType.image,
                image_url=m.group("url"),
                caption=[RichTextRun(text=caption)] if caption else [],
            )]
        return [self._node(BlockType.paragraph, decode_inline(stripped))]

    def finish(self) -> list[BlockNode]:
        """Flush an unterminated code fence as a code block."""
        if self._in_code:
            return [self._close_code()]
        return []


def parse_blocks(body: str, id_factory: Callable[[], str] = _new_id) -> list[BlockNode]:
    """Parse a Markdown body into a flat, ordered list of blocks."""
    parser = BlockParser(id_factory)
    blocks: list[BlockNode] = []
    for line in body.splitlines():
        blocks.extend(parser.feed(line))
    blocks.extend(parser.finish())
    return blocks
