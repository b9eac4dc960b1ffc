"""Unit tests for core/frontmatter.py"""

import pytest

from pagemd.core.frontmatter import decode_frontmatter, encode_frontmatter
from pagemd.core.models import PageProperties


def test_encode_quotes_scalars_and_lists_items(hello_props):
    """Strings are quoted, list items are rendered as an indented list."""
    assert encode_frontmatter(hello_props) == (
        '---\n'
        'title: "Hello"\n'
        'tags:\n'
        '  - x\n'
        '  - y\n'
        'status: "Published"\n'
        '---'
    )


def test_encode_fixed_field_order():
    props = PageProperties(
        id="p", title="T", summary="S", type="Post", status="Draft", slug="t",
        category="Tech", tags=["a"], updated_date="2024-01-02", date="2024-01-01",
    )
    keys = [line.split(":")[0] for line in encode_frontmatter(props).splitlines()
            if line and not line.startswith(("---", " "))]
    assert keys == ["title", "date", "updated", "tags", "categories", "slug", "status", "type", "summary"]


def test_encode_omits_absent_and_empty_fields():
    """An empty tag list and empty strings never reach the header."""
    text = encode_frontmatter(PageProperties(id="p", title="T", tags=[], summary=""))
    assert text == '---\ntitle: "T"\n---'


def test_empty_tags_decode_as_absent():
    """Encoding omits empty tags, so decoding yields no tags key at all."""
    fm = decode_frontmatter(encode_frontmatter(PageProperties(id="p", title="T", tags=[])) + "\n\nbody")
    assert "tags" not in fm.properties
    assert fm.properties == {"title": "T"}


def test_encode_numbers_and_booleans_unquoted():
    text = encode_frontmatter(PageProperties(id="p", title="T"), custom_fields={"weight": 3, "draft": False})
    assert "weight: 3" in text
    assert "draft: false" in text


def test_encode_custom_fields_override_extra():
    props = PageProperties(id="p", title="T", extra={"author": "Ann"})
    text = encode_frontmatter(props, custom_fields={"author": "Bob"})
    assert 'author: "Bob"' in text
    assert "Ann" not in text


def test_encode_quotes_ambiguous_list_items():
    """Items YAML would read as non-strings are quoted, and decode back unchanged."""
    props = PageProperties(id="p", title="T", tags=["2024", "a: b", "true", "plain"])
    text = encode_frontmatter(props)
    assert '  - "2024"' in text
    assert '  - "a: b"' in text
    assert "  - plain" in text
    assert decode_frontmatter(text).properties["tags"] == ["2024", "a: b", "true", "plain"]


def test_encode_escapes_quotes_in_title():
    props = PageProperties(id="p", title='Say "hi"')
    assert decode_frontmatter(encode_frontmatter(props)).properties["title"] == 'Say "hi"'


def test_decode_without_header():
    """No header: empty properties and the whole input as body."""
    fm = decode_frontmatter("# Just a body\n")
    assert fm.properties == {}
    assert fm.body == "# Just a body\n"
    assert fm.issues == []


def test_decode_splits_header_and_body():
    fm = decode_frontmatter('---\ntitle: "Hello"\n---\n\n# Hi\n')
    assert fm.properties == {"title": "Hello"}
    assert fm.body == "# Hi"


def test_decode_aliases():
    """updated, categories and description map onto property fields."""
    fm = decode_frontmatter(
        "---\ntitle: T\nupdated: 2024-05-01\ncategories:\n  - Tech\n  - Other\ndescription: About\n---\nbody"
    )
    assert fm.properties["updated_date"] == "2024-05-01"
    assert fm.properties["category"] == "Tech"
    assert fm.properties["summary"] == "About"


def test_decode_summary_wins_over_description():
    fm = decode_frontmatter("---\nsummary: Real\ndescription: Alias\n---\nbody")
    assert fm.properties["summary"] == "Real"


def test_decode_unquoted_date_normalised_to_iso():
    fm = decode_frontmatter("---\ndate: 2024-01-15\n---\nbody")
    assert fm.properties["date"] == "2024-01-15"
    assert fm.issues == []


def test_decode_invalid_date_is_an_issue_not_an_error():
    fm = decode_frontmatter('---\ntitle: T\ndate: "someday"\n---\nbody')
    assert fm.properties["date"] == "someday"
    assert any("Invalid date format" in issue for issue in fm.issues)


def test_decode_malformed_yaml_never_raises():
    fm = decode_frontmatter("---\ntitle: [unclosed\n---\nbody text")
    assert fm.properties == {}
    assert fm.body == "body text"
    assert fm.issues and fm.issues[0].startswith("Invalid YAML front matter")


def test_decode_non_mapping_header():
    fm = decode_frontmatter("---\n- a\n- b\n---\nbody")
    assert fm.properties == {}
    assert "expected a mapping" in fm.issues[0]


def test_decode_unknown_keys_go_to_extra():
    fm = decode_frontmatter("---\ntitle: T\nauthor: Ann\n---\nbody")
    assert fm.properties["extra"] == {"author": "Ann"}


def test_decode_single_tag_string_becomes_list():
    fm = decode_frontmatter("---\ntags: solo\n---\nbody")
    assert fm.properties["tags"] == ["solo"]


@pytest.mark.parametrize("key,value,field", [
    ("date",    "2024-13-45", "date"),
    ("updated", "2024-02-30", "updated_date"),
])
def test_decode_unquoted_impossible_date_is_an_issue(key, value, field):
    """An out-of-range bare YAML date is kept verbatim and reported, not raised."""
    fm = decode_frontmatter(f'---\ntitle: "T"\n{key}: {value}\n---\n\nbody\n')
    assert fm.properties[field] == value
    assert fm.properties["title"] == "T"
    assert fm.issues == [f"Invalid date format for '{field}': '{value}'"]


def test_decode_unquoted_datetime_kept_as_text():
    fm = decode_frontmatter("---\ndate: 2024-01-15 10:30:00\n---\nbody")
    assert fm.properties["date"] == "2024-01-15 10:30:00"
    assert fm.issues == []


def test_encode_quotes_tag_that_looks_like_an_impossible_date():
    text = encode_frontmatter(PageProperties(id="p", title="T", tags=["2024-13-45"]))
    assert '  - "2024-13-45"' in text
