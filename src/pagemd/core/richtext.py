"""Inline rich-text runs <-> Markdown inline spans"""

import re
from typing import Optional

from pagemd.core.models import Annotations, RichTextRun


# Alternation order is the precedence order: at any position the first
# alternative that matches wins, and matches never overlap.
INLINE_RE = re.compile(
    r"\*\*\*(?P<bold_italic>.+?)\*\*\*"
    r"|\*\*(?P<bold>.+?)\*\*"
    r"|~~(?P<strike>.+?)~~"
    r"|\*(?P<italic>.+?)\*"
    r"|`(?P<code>[^`]+)`"
    r"|\[(?P<label>[^\]]+)\]\((?P<url>[^)\s]+)\)"
)


def _wrap(run: RichTextRun) -> str:
    """Apply delimiters innermost-first: code, italic, bold, strikethrough, link."""
    if not run.text:
        return ""
    a = run.annotations
    out = run.text
    if a.code:
        out = f"`{out}`"
    if a.italic:
        out = f"*{out}*"
    if a.bold:
        out = f"**{out}**"
    if a.strikethrough:
        out = f"~~{out}~~"
    if run.link_url:
        out = f"[{out}]({run.link_url})"
    return out


def encode_runs(runs: list[RichTextRun]) -> str:
    """Render runs as Markdown inline text; each run is wrapped independently."""
    return "".join(_wrap(r) for r in runs)


def _with(base: Annotations, **flags: bool) -> Annotations:
    return base.model_copy(update=flags)


def _decode(text: str, base: Annotations, link: Optional[str]) -> list[RichTextRun]:
    runs: list[RichTextRun] = []
    pos = 0
    for m in INLINE_RE.finditer(text):
        if m.start() > pos:
            runs.append(RichTextRun(text=text[pos:m.start()], annotations=base, link_url=link))
        kind = m.lastgroup
        if kind == "bold_italic":
            runs.extend(_decode(m.group("bold_italic"), _with(base, bold=True, italic=True), link))
        elif kind == "bold":
            runs.extend(_decode(m.group("bold"), _with(base, bold=True), link))
        elif kind == "strike":
            runs.extend(_decode(m.group("strike"), _with(base, strikethrough=True), link))
        elif kind == "italic":
            runs.extend(_decode(m.group("italic"), _with(base, italic=True), link))
        elif kind == "code":
            runs.append(RichTextRun(text=m.group("code"), annotations=_with(base, code=True), link_url=link))
        else:
            runs.extend(_decode(m.group("label"), base, m.group("url")))
        pos = m.end()
    if pos < len(text):
        runs.append(RichTextRun(text=text[pos:], annotations=base, link_url=link))
    return runs


def decode_inline(text: str) -> list[RichTextRun]:
    """Split Markdown inline text into runs.

    Unterminated or malformed delimiters are kept as literal text; this never
    raises, so arbitrary third-party Markdown cannot abort a batch.
    """
    if not text:
        return []
    return _decode(text, Annotations(), None)
