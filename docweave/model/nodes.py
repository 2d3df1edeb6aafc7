"""Canonical document model.

Every composite node is a frozen pydantic model carrying a ``type``
discriminator from a closed set of variants. Plain text is a ``str`` and raw
metadata values are ordinary JSON primitives, lists and dicts.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from docweave.errors import MalformedInput, UnsupportedNodeKind


class Entity(BaseModel):
    """Base for every typed node."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    meta: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Document level
# ---------------------------------------------------------------------------


class CreativeWork(Entity):
    name: str | None = None


class Article(CreativeWork):
    """A full document. Metadata fields (title, authors, ...) are kept as extras."""

    model_config = ConfigDict(extra="allow")

    type: Literal["Article"] = "Article"
    content: list[BlockContent] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _coerce_metadata(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            key: value if key in cls.model_fields else _coerce(value)
            for key, value in data.items()
        }


class Collection(CreativeWork):
    """A named grouping of documents; at most one part is flagged ``meta.main``."""

    type: Literal["Collection"] = "Collection"
    parts: list[CreativeWorkContent] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Block level
# ---------------------------------------------------------------------------


class Heading(Entity):
    type: Literal["Heading"] = "Heading"
    depth: int = Field(default=1, ge=1, le=6)
    content: list[InlineContent] = Field(default_factory=list)


class Paragraph(Entity):
    type: Literal["Paragraph"] = "Paragraph"
    content: list[InlineContent] = Field(default_factory=list)


class QuoteBlock(Entity):
    type: Literal["QuoteBlock"] = "QuoteBlock"
    content: list[BlockContent] = Field(default_factory=list)


class CodeBlock(Entity):
    type: Literal["CodeBlock"] = "CodeBlock"
    value: str = ""
    language: str | None = None


class CodeChunk(Entity):
    type: Literal["CodeChunk"] = "CodeChunk"
    text: str = ""
    language: str | None = None


class ListItem(Entity):
    type: Literal["ListItem"] = "ListItem"
    content: list[BlockContent] = Field(default_factory=list)
    checked: bool | None = None


class List(Entity):
    type: Literal["List"] = "List"
    order: Literal["ascending", "descending", "unordered"] = "unordered"
    items: list[ListItem] = Field(default_factory=list)


class TableCell(Entity):
    type: Literal["TableCell"] = "TableCell"
    content: list[InlineContent] = Field(default_factory=list)


class TableRow(Entity):
    type: Literal["TableRow"] = "TableRow"
    cells: list[TableCell] = Field(default_factory=list)


class Table(Entity):
    type: Literal["Table"] = "Table"
    rows: list[TableRow] = Field(default_factory=list)


class ThematicBreak(Entity):
    type: Literal["ThematicBreak"] = "ThematicBreak"


# ---------------------------------------------------------------------------
# Inline level
# ---------------------------------------------------------------------------


class Emphasis(Entity):
    type: Literal["Emphasis"] = "Emphasis"
    content: list[InlineContent] = Field(default_factory=list)


class Strong(Entity):
    type: Literal["Strong"] = "Strong"
    content: list[InlineContent] = Field(default_factory=list)


class Delete(Entity):
    type: Literal["Delete"] = "Delete"
    content: list[InlineContent] = Field(default_factory=list)


class Quote(Entity):
    type: Literal["Quote"] = "Quote"
    content: list[InlineContent] = Field(default_factory=list)
    cite: str | None = None


class Code(Entity):
    type: Literal["Code"] = "Code"
    value: str = ""
    language: str | None = None


class Link(Entity):
    type: Literal["Link"] = "Link"
    content: list[InlineContent] = Field(default_factory=list)
    target: str = ""
    description: str | None = None


class ImageObject(Entity):
    type: Literal["ImageObject"] = "ImageObject"
    content_url: str = Field(default="", alias="contentUrl")
    caption: str | None = None
    content: list[InlineContent] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Unions over the closed variant set
# ---------------------------------------------------------------------------

InlineEntity = Annotated[
    Union[Emphasis, Strong, Delete, Quote, Code, Link, ImageObject],
    Field(discriminator="type"),
]

InlineContent = Union[str, InlineEntity]

BlockContent = Annotated[
    Union[
        Heading,
        Paragraph,
        QuoteBlock,
        CodeBlock,
        CodeChunk,
        List,
        Table,
        ThematicBreak,
    ],
    Field(discriminator="type"),
]

CreativeWorkContent = Annotated[
    Union[Article, Collection],
    Field(discriminator="type"),
]

AnyEntity = Annotated[
    Union[
        Article,
        Collection,
        Heading,
        Paragraph,
        QuoteBlock,
        CodeBlock,
        CodeChunk,
        List,
        ListItem,
        Table,
        TableRow,
        TableCell,
        ThematicBreak,
        Emphasis,
        Strong,
        Delete,
        Quote,
        Code,
        Link,
        ImageObject,
    ],
    Field(discriminator="type"),
]

# Anything a codec may decode to or encode from.
Node = Union[Entity, None, bool, int, float, str, list, dict]

BLOCK_TYPES: tuple[type[Entity], ...] = (
    Heading,
    Paragraph,
    QuoteBlock,
    CodeBlock,
    CodeChunk,
    List,
    Table,
    ThematicBreak,
)

INLINE_TYPES: tuple[type[Entity], ...] = (
    Emphasis,
    Strong,
    Delete,
    Quote,
    Code,
    Link,
    ImageObject,
)

_ENTITY_CLASSES: tuple[type[Entity], ...] = (
    Article,
    Collection,
    *BLOCK_TYPES,
    ListItem,
    TableRow,
    TableCell,
    *INLINE_TYPES,
)

for _cls in _ENTITY_CLASSES:
    _cls.model_rebuild()

NODE_CLASSES: dict[str, type[Entity]] = {
    cls.model_fields["type"].default: cls for cls in _ENTITY_CLASSES
}

_entity_adapter: TypeAdapter[Entity] = TypeAdapter(AnyEntity)


# ---------------------------------------------------------------------------
# Loading and dumping canonical JSON values
# ---------------------------------------------------------------------------


def load_node(value: Any, source: str | None = None) -> Node:
    """Turn a canonical JSON value into a node tree.

    Raises UnsupportedNodeKind for a ``type`` tag outside the closed set, and
    MalformedInput for any other schema violation.
    """
    if isinstance(value, list):
        return [load_node(item, source) for item in value]
    if isinstance(value, dict):
        if "type" not in value:
            return {key: load_node(item, source) for key, item in value.items()}
        kind = value["type"]
        if not isinstance(kind, str) or kind not in NODE_CLASSES:
            raise UnsupportedNodeKind(str(kind))
        try:
            return _entity_adapter.validate_python(value)
        except ValidationError as exc:
            raise _translate(exc, source) from exc
    return value


def dump_node(node: Node) -> Any:
    """Canonical JSON value of a node (camelCase names, unset fields omitted)."""
    if isinstance(node, BaseModel):
        return node.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(node, list):
        return [dump_node(item) for item in node]
    if isinstance(node, dict):
        return {key: dump_node(value) for key, value in node.items()}
    return node


def to_json(node: Node, indent: int | None = None) -> str:
    return json.dumps(dump_node(node), indent=indent, ensure_ascii=False)


def from_json(text: str, source: str | None = None) -> Node:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInput(source, f"invalid JSON ({exc.msg})", exc) from exc
    return load_node(value, source)


def _coerce(value: Any) -> Any:
    """Lenient conversion used for Article metadata: known typed dicts become
    nodes, dicts with any other ``type`` stay raw values."""
    if isinstance(value, list):
        return [_coerce(item) for item in value]
    if isinstance(value, dict):
        kind = value.get("type")
        if isinstance(kind, str) and kind in NODE_CLASSES:
            try:
                return _entity_adapter.validate_python(value)
            except ValidationError as exc:
                # Reported by the enclosing Article validation
                raise ValueError(f"invalid {kind} value: {exc.errors()[0]['msg']}") from exc
        return {key: _coerce(item) for key, item in value.items()}
    return value


def _translate(exc: ValidationError, source: str | None) -> Exception:
    for error in exc.errors():
        if error["type"] == "union_tag_invalid":
            return UnsupportedNodeKind(str(error["ctx"]["tag"]))
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return MalformedInput(source, f"{location}: {first['msg']}")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def node_type(node: Node) -> str:
    """Name of a node's type, including the raw primitive kinds."""
    if node is None:
        return "null"
    if isinstance(node, bool):
        return "boolean"
    if isinstance(node, (int, float)):
        return "number"
    if isinstance(node, str):
        return "string"
    if isinstance(node, list):
        return "array"
    if isinstance(node, Entity):
        return node.type
    return "object"


def is_creative_work(node: Node) -> bool:
    return isinstance(node, (Article, Collection))


def is_block(node: Node) -> bool:
    return isinstance(node, BLOCK_TYPES)


def is_inline(node: Node) -> bool:
    return isinstance(node, (str, *INLINE_TYPES))


def as_article(node: Node) -> Article:
    """Wrap a block, inline or primitive node so it can be encoded as a document."""
    if isinstance(node, Article):
        return node
    if isinstance(node, Collection):
        raise UnsupportedNodeKind("Collection")
    if is_block(node):
        return Article(content=[node])
    if is_inline(node):
        return Article(content=[Paragraph(content=[node])])
    if isinstance(node, ListItem):
        return Article(content=[List(items=[node])])
    return Article(content=[Paragraph(content=[to_json(node)])])
