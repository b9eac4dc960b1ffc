"""Markdown file discovery for import and validation"""

from pathlib import Path

from pagemd.core.models import SourceFile


MD_EXTENSIONS = {'.md', '.markdown'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted Markdown files under path, or [path] if a single Markdown file."""
    if path.is_file():
        return [path] if path.suffix.lower() in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in MD_EXTENSIONS)


def load_sources(paths: list[Path]) -> list[SourceFile]:
    """Read every Markdown file under paths, deduplicated, in discovery order."""
    seen: set[Path] = set()
    sources = []
    for root in paths:
        for p in discover_files(root):
            if p in seen:
                continue
            seen.add(p)
            sources.append(SourceFile(file_name=p.name, content=p.read_text(encoding='utf-8')))
    return sources
