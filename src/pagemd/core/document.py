"""Whole-page transcoding: Document <-> Markdown with front matter"""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Optional

from pagemd.core.blocks import ImageHook, block_to_markdown, parse_blocks
from pagemd.core.frontmatter import decode_frontmatter, encode_frontmatter
from pagemd.core.models import Document, PageProperties
from pagemd.core.utils.slug import slugify


MD_SUFFIXES = (".md", ".markdown")


@dataclass
class ParsedDocument:
    document: Document
    issues: list[str] = field(default_factory=list)


def document_to_markdown(
    doc: Document,
    *,
    image_hook: Optional[ImageHook] = None,
    custom_fields: Optional[dict[str, Any]] = None,
    ) -> str:
    """Front matter, a blank line, then each block depth-first separated by blank lines."""
    header = encode_frontmatter(doc.properties, custom_fields)
    parts = [block_to_markdown(node, image_hook) for node in doc.walk()]
    body = "\n\n".join(p for p in parts if p)
    return f"{header}\n\n{body}\n" if body else f"{header}\n"


def title_from_file_name(file_name: str) -> str:
    """Strip directories and a Markdown suffix from a file name."""
    name = PurePath(file_name).name
    for suffix in MD_SUFFIXES:
        if name.lower().endswith(suffix):
            return name[: -len(suffix)]
    return name


def document_from_markdown(raw: str, fallback_name: str = "") -> ParsedDocument:
    """Parse a Markdown document into a flat Document; title falls back to the file name."""
    fm = decode_frontmatter(raw)
    props = dict(fm.properties)
    if not props.get("title"):
        props["title"] = title_from_file_name(fallback_name) if fallback_name else ""
    if not props.get("id"):
        props["id"] = props.get("slug") or slugify(props["title"]) or "untitled"
    properties = PageProperties(**props)
    return ParsedDocument(
        document=Document.from_flat(properties, parse_blocks(fm.body)),
        issues=list(fm.issues),
    )


def export_file_name(props: PageProperties) -> str:
    """`<slug>.md`, falling back to the page id."""
    return f"{props.slug or props.id}.md"
