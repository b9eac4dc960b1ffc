"""Structural checks for uploaded Markdown documents"""

import logging

from markdown_it import MarkdownIt

from pagemd.core.document import title_from_file_name
from pagemd.core.frontmatter import decode_frontmatter
from pagemd.core.models import SourceFile, ValidationOutcome, ValidationReport


logger = logging.getLogger(__name__)

UNSUPPORTED_TOKENS: dict[str, str] = {
    "table_open": "Tables are not supported and will be imported as plain paragraphs",
    "html_block": "Raw HTML blocks are not supported and will be imported as plain paragraphs",
}


def _make_parser(preset: str = "gfm-like") -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def unsupported_constructs(body: str, preset: str = "gfm-like") -> list[str]:
    """List constructs in body that the line-oriented block parser cannot represent."""
    warnings: list[str] = []
    depth = 0
    for tok in _make_parser(preset).parse(body):
        if tok.type == "blockquote_open":
            depth += 1
            if depth == 2:
                warnings.append("Nested block quotes are flattened to a single level")
        elif tok.type == "blockquote_close":
            depth -= 1
        elif tok.type in UNSUPPORTED_TOKENS:
            warnings.append(UNSUPPORTED_TOKENS[tok.type])
    return list(dict.fromkeys(warnings))


def validate_document(content: str, file_name: str) -> ValidationOutcome:
    """Check title, body and dates of one document. Never raises."""
    file_name = file_name or ""
    try:
        fm = decode_frontmatter(content)
        issues: list[str] = []
        if not fm.properties.get("title") and not title_from_file_name(file_name):
            issues.append("No title found in front matter or filename")
        if not fm.body.strip():
            issues.append("Empty content")
        issues.extend(fm.issues)
        return ValidationOutcome(
            file_name=file_name,
            valid=not issues,
            issues=issues,
            warnings=unsupported_constructs(fm.body),
            parsed_properties=fm.properties,
            parsed_content_length=len(fm.body),
        )
    except Exception as e:
        logger.exception("Validation crashed", extra={"file_name": file_name})
        return ValidationOutcome(file_name=file_name, valid=False, issues=[f"Parse error: {e}"])


def validate_documents(files: list[SourceFile]) -> ValidationReport:
    """Validate every file and summarise the counts."""
    results = [validate_document(f.content, f.file_name) for f in files]
    valid = sum(1 for r in results if r.valid)
    return ValidationReport(
        total_files=len(results),
        valid_files=valid,
        invalid_files=len(results) - valid,
        results=results,
    )
