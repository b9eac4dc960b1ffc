"""Shared fixtures for core unit tests"""

import pytest

from pagemd.core.models import BlockNode, BlockType, Document, PageProperties, RichTextRun
from pagemd.core.richtext import decode_inline


HELLO_MD = """\
---
title: "Hello"
tags:
  - x
  - y
status: "Published"
---

# Hi

World **bold**
"""

SAMPLE_MD = """\
---
title: "Sample"
date: "2024-03-01"
---

## Intro

A paragraph with *style*.

- first
- second

```python
print("# not a heading")
```

---

![A cat](https://img.example/cat.png)
"""


@pytest.fixture(name="hello_md")
def hello_md_fixture():
    return HELLO_MD


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="hello_props")
def hello_props_fixture():
    return PageProperties(id="page-1", title="Hello", tags=["x", "y"], status="Published")


@pytest.fixture(name="hello_doc")
def hello_doc_fixture(hello_props):
    blocks = [
        BlockNode(id="b1", type=BlockType.heading1, runs=[RichTextRun(text="Hi")]),
        BlockNode(id="b2", type=BlockType.paragraph, runs=decode_inline("World **bold**")),
    ]
    return Document.from_flat(hello_props, blocks)


@pytest.fixture(name="pages")
def pages_fixture():
    return [
        PageProperties(id="p1", title="Python tips", status="Published", type="Post",
                       category="Tech", tags=["python", "tips"], date="2024-01-10"),
        PageProperties(id="p2", title="Garden diary", status="Draft", type="Post",
                       category="Life", tags=["garden"], date="2024-02-20",
                       summary="Notes on tomatoes"),
        PageProperties(id="p3", title="About", status="Published", type="Page",
                       category="Meta", date="not a date"),
        PageProperties(id="p4", title="Undated", status="Published", type="Post"),
    ]
