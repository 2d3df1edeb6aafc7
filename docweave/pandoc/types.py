"""Tags, constants and element helpers for the pandoc JSON AST.

The grammar is owned by pandoc (``pandoc-types``); the values here must match
it exactly. Every element is ``{"t": tag, "c": payload}``, nullary elements
omit ``c``, and attributes are ``[identifier, [classes], [[key, value], ...]]``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

API_VERSION: list[int] = [1, 23, 1]

# Glyphs pandoc's Markdown reader uses for task list checkboxes
UNCHECKED_BOX = "☐"
CHECKED_BOX = "☒"

_NO_PAYLOAD = object()


class BlockTag(str, Enum):
    """Block elements handled by the bridge."""

    HEADER = "Header"
    PARA = "Para"
    PLAIN = "Plain"
    BLOCK_QUOTE = "BlockQuote"
    CODE_BLOCK = "CodeBlock"
    BULLET_LIST = "BulletList"
    ORDERED_LIST = "OrderedList"
    TABLE = "Table"
    HORIZONTAL_RULE = "HorizontalRule"


class InlineTag(str, Enum):
    """Inline elements handled by the bridge."""

    STR = "Str"
    SPACE = "Space"
    SOFT_BREAK = "SoftBreak"
    EMPH = "Emph"
    STRONG = "Strong"
    STRIKEOUT = "Strikeout"
    QUOTED = "Quoted"
    CODE = "Code"
    LINK = "Link"
    IMAGE = "Image"


class MetaTag(str, Enum):
    """Metadata value constructors."""

    BOOL = "MetaBool"
    STRING = "MetaString"
    LIST = "MetaList"
    MAP = "MetaMap"
    INLINES = "MetaInlines"
    BLOCKS = "MetaBlocks"


def element(tag: str | Enum, payload: Any = _NO_PAYLOAD) -> dict[str, Any]:
    """Build a ``{"t", "c"}`` element; nullary constructors carry no ``c``."""
    name = tag.value if isinstance(tag, Enum) else tag
    if payload is _NO_PAYLOAD:
        return {"t": name}
    return {"t": name, "c": payload}


def attr(
    identifier: str = "",
    classes: list[str] | None = None,
    pairs: list[list[str]] | None = None,
) -> list[Any]:
    return [identifier, list(classes or []), list(pairs or [])]


def empty_attr() -> list[Any]:
    return attr()


def first_class(attributes: list[Any]) -> str | None:
    """First class of an attribute triple, used as a code language."""
    classes = attributes[1] if len(attributes) > 1 else []
    return classes[0] if classes else None


def attr_pairs(attributes: list[Any]) -> dict[str, str]:
    pairs = attributes[2] if len(attributes) > 2 else []
    return {key: value for key, value in pairs}


def list_attributes(start: int = 1) -> list[Any]:
    """``ListAttributes`` for an ordered list with default style and delimiter."""
    return [start, element("DefaultStyle"), element("DefaultDelim")]


def document(meta: dict[str, Any], blocks: list[dict[str, Any]]) -> dict[str, Any]:
    return {"pandoc-api-version": list(API_VERSION), "meta": meta, "blocks": blocks}
