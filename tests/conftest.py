"""Shared test fixtures for docweave."""

import io
import json
from pathlib import Path

import pytest
from PIL import Image

from docweave.config import DocweaveConfig, set_config
from docweave.model import (
    Article,
    CodeBlock,
    Emphasis,
    Heading,
    Link,
    List,
    ListItem,
    Paragraph,
    Strong,
)


@pytest.fixture(autouse=True)
def default_config():
    """Keep any docweave.yaml on the machine out of the tests."""
    cfg = DocweaveConfig()
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def sample_article():
    return Article(
        title="Widget handbook",
        content=[
            Heading(depth=1, content=["Introduction"]),
            Paragraph(
                content=[
                    "Widgets are ",
                    Emphasis(content=["small"]),
                    " and ",
                    Strong(content=["useful"]),
                    ". See ",
                    Link(content=["the docs"], target="https://example.com/docs"),
                    ".",
                ]
            ),
            CodeBlock(value="print('hello')", language="python"),
            List(
                order="unordered",
                items=[
                    ListItem(content=[Paragraph(content=["one"])]),
                    ListItem(content=[Paragraph(content=["two"])]),
                ],
            ),
        ],
    )


@pytest.fixture
def png_bytes():
    """A tiny PNG with no text chunks."""
    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def write_article():
    """Write a one-paragraph Article as canonical JSON."""

    def _write(path: Path, text: str, **fields) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        node = {"type": "Article", **fields, "content": [{"type": "Paragraph", "content": [text]}]}
        path.write_text(json.dumps(node))
        return path

    return _write
