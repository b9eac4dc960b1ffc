"""Page properties <-> YAML front-matter header"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from pagemd.core.models import PageProperties
from pagemd.core.utils.dates import parse_date, to_iso


DELIMITER = "---"

# Front-matter key -> PageProperties field, for keys accepted on decode.
KEY_ALIASES: dict[str, str] = {
    "id": "id",
    "title": "title",
    "date": "date",
    "updated": "updated_date",
    "updated_date": "updated_date",
    "tags": "tags",
    "category": "category",
    "categories": "category",
    "slug": "slug",
    "status": "status",
    "type": "type",
    "summary": "summary",
    "description": "summary",
}
DATE_FIELDS = {"date", "updated_date"}


class _Loader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as strings; dates are checked by parse_date."""


_Loader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _load(text: str) -> Any:
    return yaml.load(text, Loader=_Loader)


@dataclass
class FrontMatter:
    """Decoded header: canonical property fields, remaining body, non-fatal issues."""
    properties: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    issues: list[str] = field(default_factory=list)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _scalar(value: Any) -> str:
    """Quote strings; leave numbers and booleans bare."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False, default=str)
    return json.dumps(to_iso(value), ensure_ascii=False)


def _item(value: Any) -> str:
    """Render a list item bare when YAML would read it back as the same string."""
    text = to_iso(value)
    try:
        if text and yaml.safe_load(text) == text:
            return text
    except (yaml.YAMLError, ValueError):
        pass
    return json.dumps(text, ensure_ascii=False)


def _ordered_fields(props: PageProperties) -> dict[str, Any]:
    return {
        "title": props.title,
        "date": props.date,
        "updated": props.updated_date,
        "tags": props.tags,
        "categories": [props.category] if props.category else None,
        "slug": props.slug,
        "status": props.status,
        "type": props.type,
        "summary": props.summary,
    }


def encode_frontmatter(props: PageProperties, custom_fields: Optional[dict[str, Any]] = None) -> str:
    """Render present, non-empty properties as a `---` delimited header in a fixed key order."""
    fields = _ordered_fields(props)
    for key, value in props.extra.items():
        fields.setdefault(key, value)
    fields.update(custom_fields or {})

    lines = [DELIMITER]
    for key, value in fields.items():
        if _is_empty(value):
            continue
        if isinstance(value, (list, tuple)):
            lines.append(f"{key}:")
            lines.extend(f"  - {_item(v)}" for v in value)
        else:
            lines.append(f"{key}: {_scalar(value)}")
    lines.append(DELIMITER)
    return "\n".join(lines)


def _split(raw: str) -> tuple[Optional[str], str]:
    """Return (header_text, body); header_text is None when there is no header."""
    lines = raw.splitlines()
    if not lines or lines[0].strip() != DELIMITER:
        return None, raw
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            header = "\n".join(lines[1:i])
            body = "\n".join(lines[i + 1:]).lstrip("\n")
            return header, body
    return None, raw


def _normalise(key: str, value: Any, issues: list[str]) -> Any:
    if key == "tags":
        items = value if isinstance(value, list) else [value]
        return [to_iso(v) for v in items if v is not None]
    if key == "category" and isinstance(value, list):
        return to_iso(value[0]) if value else None
    if key in DATE_FIELDS:
        text = to_iso(value)
        if parse_date(value) is None:
            issues.append(f"Invalid date format for '{key}': {text!r}")
        return text
    return to_iso(value)


def decode_frontmatter(raw: str) -> FrontMatter:
    """Split a document into canonical properties and body. Never raises.

    A malformed header yields empty properties plus an issue; a bad date is
    kept verbatim and reported as an issue.
    """
    header, body = _split(raw)
    if header is None:
        return FrontMatter(properties={}, body=raw)

    issues: list[str] = []
    try:
        data = _load(header) if header.strip() else {}
    except (yaml.YAMLError, ValueError) as e:
        return FrontMatter(properties={}, body=body, issues=[f"Invalid YAML front matter: {e}"])
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return FrontMatter(
            properties={}, body=body,
            issues=[f"Invalid YAML front matter: expected a mapping, got {type(data).__name__}"],
        )

    props: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for raw_key, value in data.items():
        key = KEY_ALIASES.get(str(raw_key))
        if key is None:
            extra[str(raw_key)] = value
            continue
        # `summary` and `category` win over their aliases regardless of order
        if value is None or (key in props and raw_key in ("description", "categories")):
            continue
        normalised = _normalise(key, value, issues)
        if normalised is not None:
            props[key] = normalised
    if extra:
        props["extra"] = extra
    return FrontMatter(properties=props, body=body, issues=issues)
