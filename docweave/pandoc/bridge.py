"""Bidirectional mapping between canonical nodes and the pandoc JSON AST.

Only the node kinds both grammars express are mapped. Anything else fails
with UnsupportedNodeKind naming the offending tag or type; a partial document
is never returned.

Known limitations, kept deliberately:
  - Tables are a stub: decoding yields no rows and encoding yields an empty
    table.
  - A list item keeps only its first block; further blocks are dropped.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from docweave.errors import MalformedInput, UnsupportedNodeKind, snippet
from docweave.model import (
    Article,
    BlockContent,
    Code,
    CodeBlock,
    Delete,
    Emphasis,
    Entity,
    Heading,
    ImageObject,
    InlineContent,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Quote,
    QuoteBlock,
    Strong,
    Table,
    ThematicBreak,
    dump_node,
    node_type,
)
from docweave.pandoc.types import (
    CHECKED_BOX,
    UNCHECKED_BOX,
    BlockTag,
    InlineTag,
    MetaTag,
    attr,
    attr_pairs,
    document,
    element,
    empty_attr,
    first_class,
    list_attributes,
)

logger = logging.getLogger(__name__)

GRAMMAR = "pandoc"

# Article keys that engine metadata can never override
_RESERVED_META_KEYS = ("type", "content")

_TEXT_TAGS = (InlineTag.STR, InlineTag.SPACE, InlineTag.SOFT_BREAK)

# Raised when an element payload does not have the shape its tag requires
_SHAPE_ERRORS = (ValueError, TypeError, AttributeError, KeyError, IndexError)


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def from_external(pdoc: dict[str, Any]) -> Article:
    """Map a pandoc ``Document`` to an Article."""
    if not isinstance(pdoc, dict) or not isinstance(pdoc.get("blocks"), list):
        raise MalformedInput(None, "expected a pandoc document with a 'blocks' list")

    meta = parse_meta(pdoc.get("meta") or {})
    for key in _RESERVED_META_KEYS:
        if meta.pop(key, None) is not None:
            logger.debug("Ignoring reserved metadata key %r", key)
    if isinstance(meta.get("name"), Paragraph):
        meta["name"] = _plain_text(meta["name"].content)

    content = parse_blocks(pdoc["blocks"])
    try:
        return Article(**meta, content=content)
    except ValidationError as exc:
        raise MalformedInput(None, f"invalid document metadata ({exc.errors()[0]['msg']})", exc) from exc


def to_external(node: Node) -> dict[str, Any]:
    """Map an Article to a pandoc ``Document``. Other roots are rejected."""
    if not isinstance(node, Article):
        raise UnsupportedNodeKind(node_type(node))
    fields = {
        key: value
        for key, value in node
        if key not in _RESERVED_META_KEYS and value is not None
    }
    return document(unparse_meta(fields), unparse_blocks(node.content))


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def parse_meta(meta: dict[str, Any]) -> dict[str, Any]:
    if not isinstance(meta, dict):
        raise MalformedInput(None, f"expected a metadata map, got {snippet(_dumps(meta))}")
    return {key: parse_meta_value(value) for key, value in meta.items()}


def unparse_meta(fields: dict[str, Any]) -> dict[str, Any]:
    return {key: unparse_meta_value(value) for key, value in fields.items()}


def parse_meta_value(value: dict[str, Any]) -> Any:
    tag, payload = _split(value)
    try:
        match tag:
            case MetaTag.BOOL | MetaTag.STRING:
                return payload
            case MetaTag.LIST:
                return [parse_meta_value(item) for item in payload]
            case MetaTag.MAP:
                return parse_meta(payload)
            case MetaTag.INLINES:
                return Paragraph(content=parse_inlines(payload))
            case MetaTag.BLOCKS:
                # There is no generic division node, so a quote block stands in
                return QuoteBlock(content=parse_blocks(payload))
    except _SHAPE_ERRORS as exc:
        raise _malformed(tag, value, exc) from exc
    raise UnsupportedNodeKind(str(tag), GRAMMAR)


def unparse_meta_value(value: Any) -> dict[str, Any]:
    match value:
        case None:
            raise UnsupportedNodeKind("null")
        case bool():
            return element(MetaTag.BOOL, value)
        case int() | float():
            return element(MetaTag.STRING, json.dumps(value))
        case str():
            return element(MetaTag.STRING, value)
        case list():
            return element(MetaTag.LIST, [unparse_meta_value(item) for item in value])
        case Paragraph():
            return element(MetaTag.INLINES, unparse_inlines(value.content))
        case QuoteBlock():
            return element(MetaTag.BLOCKS, unparse_blocks(value.content))
        case Entity():
            return unparse_meta_value(dump_node(value))
        case dict():
            return element(
                MetaTag.MAP,
                {
                    key: unparse_meta_value(item)
                    for key, item in value.items()
                    if item is not None
                },
            )
    raise UnsupportedNodeKind(node_type(value))


# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------


def parse_blocks(blocks: list[dict[str, Any]]) -> list[BlockContent]:
    return [parse_block(block) for block in blocks]


def unparse_blocks(nodes: list[Node]) -> list[dict[str, Any]]:
    return [unparse_block(node) for node in nodes]


def parse_block(block: dict[str, Any]) -> BlockContent:
    tag, payload = _split(block)
    try:
        match tag:
            case BlockTag.HEADER:
                depth, _attrs, inlines = payload
                return Heading(depth=depth, content=parse_inlines(inlines))
            case BlockTag.PARA | BlockTag.PLAIN:
                return Paragraph(content=parse_inlines(payload))
            case BlockTag.BLOCK_QUOTE:
                return QuoteBlock(content=parse_blocks(payload))
            case BlockTag.CODE_BLOCK:
                return _parse_code_block(payload)
            case BlockTag.BULLET_LIST:
                return _parse_list(payload, "unordered")
            case BlockTag.ORDERED_LIST:
                return _parse_list(payload[1], "ascending")
            case BlockTag.TABLE:
                return Table(rows=[])
            case BlockTag.HORIZONTAL_RULE:
                return ThematicBreak()
    except _SHAPE_ERRORS as exc:
        raise _malformed(tag, block, exc) from exc
    raise UnsupportedNodeKind(str(tag), GRAMMAR)


def unparse_block(node: Node) -> dict[str, Any]:
    match node:
        case Heading():
            return element(
                BlockTag.HEADER,
                [node.depth, empty_attr(), unparse_inlines(node.content)],
            )
        case Paragraph():
            return element(BlockTag.PARA, unparse_inlines(node.content))
        case QuoteBlock():
            return element(BlockTag.BLOCK_QUOTE, unparse_blocks(node.content))
        case CodeBlock():
            return _unparse_code_block(node)
        case List():
            return _unparse_list(node)
        case Table():
            return _unparse_table(node)
        case ThematicBreak():
            return element(BlockTag.HORIZONTAL_RULE)
    raise UnsupportedNodeKind(node_type(node))


def _parse_code_block(payload: list[Any]) -> CodeBlock:
    attributes, text = payload
    pairs = attr_pairs(attributes)
    return CodeBlock(
        value=text,
        language=first_class(attributes),
        meta=pairs or None,
    )


def _unparse_code_block(node: CodeBlock) -> dict[str, Any]:
    classes = [node.language] if node.language else []
    pairs = [[key, str(value)] for key, value in (node.meta or {}).items()]
    return element(BlockTag.CODE_BLOCK, [attr("", classes, pairs), node.value])


def _parse_list(items: list[list[dict[str, Any]]], order: str) -> List:
    return List(order=order, items=[_parse_list_item(blocks) for blocks in items])


def _parse_list_item(blocks: list[dict[str, Any]]) -> ListItem:
    parsed = parse_blocks(blocks)
    if len(parsed) > 1:
        logger.debug("List item has %d blocks; keeping only the first", len(parsed))
    content = parsed[:1]
    checked = None
    if content and isinstance(content[0], Paragraph):
        checked, inlines = _strip_checkbox(content[0].content)
        if checked is not None:
            if not inlines and len(blocks) == 1 and blocks[0].get("t") == BlockTag.PLAIN:
                # A lone Plain checkbox is how an empty task item is written
                content = []
            else:
                content = [content[0].model_copy(update={"content": inlines})]
    return ListItem(content=content, checked=checked)


def _unparse_list(node: List) -> dict[str, Any]:
    items = [_unparse_list_item(item) for item in node.items]
    if node.order == "ascending":
        return element(BlockTag.ORDERED_LIST, [list_attributes(), items])
    return element(BlockTag.BULLET_LIST, items)


def _unparse_list_item(item: ListItem) -> list[dict[str, Any]]:
    content = list(item.content)
    if item.checked is not None:
        box = CHECKED_BOX if item.checked else UNCHECKED_BOX
        first = content[0] if content else None
        if isinstance(first, Paragraph):
            inlines = list(first.content)
            if inlines and isinstance(inlines[0], str):
                inlines[0] = f"{box} {inlines[0]}"
            else:
                inlines.insert(0, f"{box} ")
            content[0] = first.model_copy(update={"content": inlines})
        elif not content:
            return [element(BlockTag.PLAIN, unparse_inlines([box]))]
        else:
            content.insert(0, Paragraph(content=[box]))
    return unparse_blocks(content)


def _strip_checkbox(
    inlines: list[InlineContent],
) -> tuple[bool | None, list[InlineContent]]:
    if not inlines or not isinstance(inlines[0], str):
        return None, inlines
    text = inlines[0]
    for box, checked in ((UNCHECKED_BOX, False), (CHECKED_BOX, True)):
        if text == box or text.startswith(box + " "):
            rest = text[len(box) + 1 :]
            return checked, ([rest] if rest else []) + list(inlines[1:])
    return None, inlines


def _unparse_table(node: Table) -> dict[str, Any]:
    # Stub: caption, column specs, head, bodies and foot are all empty
    if node.rows:
        logger.debug("Dropping %d table rows: table mapping is not implemented", len(node.rows))
    caption = [None, []]
    head = [empty_attr(), []]
    foot = [empty_attr(), []]
    return element(BlockTag.TABLE, [empty_attr(), caption, [], head, [], foot])


# ---------------------------------------------------------------------------
# Inlines
# ---------------------------------------------------------------------------


def parse_inlines(nodes: list[dict[str, Any]]) -> list[InlineContent]:
    """Parse inline elements, merging runs of text and spaces first."""
    return [parse_inline(node) for node in coalesce(nodes)]


def unparse_inlines(nodes: list[InlineContent]) -> list[dict[str, Any]]:
    return [unparse_inline(node) for node in nodes]


def coalesce(nodes: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Merge each run of ``Str``/``Space``/``SoftBreak`` into a single ``Str``."""
    merged: list[dict[str, Any]] = []
    run: list[str] | None = None
    for node in nodes:
        tag = node.get("t") if isinstance(node, dict) else None
        if tag in _TEXT_TAGS:
            if run is None:
                run = []
                merged.append(element(InlineTag.STR, ""))
            run.append(node.get("c", "") if tag == InlineTag.STR else " ")
            merged[-1]["c"] = "".join(run)
        else:
            run = None
            merged.append(node)
    return merged


def parse_inline(node: dict[str, Any]) -> InlineContent:
    tag, payload = _split(node)
    try:
        match tag:
            case InlineTag.STR:
                if not isinstance(payload, str):
                    raise TypeError("Str payload must be a string")
                return payload
            case InlineTag.SPACE | InlineTag.SOFT_BREAK:
                return " "
            case InlineTag.EMPH:
                return Emphasis(content=parse_inlines(payload))
            case InlineTag.STRONG:
                return Strong(content=parse_inlines(payload))
            case InlineTag.STRIKEOUT:
                return Delete(content=parse_inlines(payload))
            case InlineTag.QUOTED:
                # Single versus double quoting is not preserved
                return Quote(content=parse_inlines(payload[1]))
            case InlineTag.CODE:
                attributes, text = payload
                return Code(value=text, language=first_class(attributes))
            case InlineTag.LINK:
                _attrs, inlines, (url, title) = payload
                return Link(
                    content=parse_inlines(inlines),
                    target=url,
                    description=title or None,
                )
            case InlineTag.IMAGE:
                _attrs, inlines, (url, title) = payload
                return ImageObject(
                    content_url=url,
                    caption=title or None,
                    content=parse_inlines(inlines),
                )
    except _SHAPE_ERRORS as exc:
        raise _malformed(tag, node, exc) from exc
    raise UnsupportedNodeKind(str(tag), GRAMMAR)


def unparse_inline(node: InlineContent) -> dict[str, Any]:
    match node:
        case str():
            return element(InlineTag.STR, node)
        case Emphasis():
            return element(InlineTag.EMPH, unparse_inlines(node.content))
        case Strong():
            return element(InlineTag.STRONG, unparse_inlines(node.content))
        case Delete():
            return element(InlineTag.STRIKEOUT, unparse_inlines(node.content))
        case Quote():
            return element(
                InlineTag.QUOTED,
                [element("SingleQuote"), unparse_inlines(node.content)],
            )
        case Code():
            classes = [node.language] if node.language else []
            return element(InlineTag.CODE, [attr("", classes), node.value])
        case Link():
            return element(
                InlineTag.LINK,
                [
                    empty_attr(),
                    unparse_inlines(node.content),
                    [node.target, node.description or ""],
                ],
            )
        case ImageObject():
            return element(
                InlineTag.IMAGE,
                [
                    empty_attr(),
                    unparse_inlines(node.content),
                    [node.content_url, node.caption or ""],
                ],
            )
    raise UnsupportedNodeKind(node_type(node))


def _plain_text(inlines: list[InlineContent]) -> str:
    return "".join(item for item in inlines if isinstance(item, str))


def _split(value: Any) -> tuple[Any, Any]:
    """Tag and payload of an element, which must be a ``{"t", "c"}`` map."""
    if not isinstance(value, dict):
        raise MalformedInput(None, f"expected a pandoc element, got {snippet(_dumps(value))}")
    return value.get("t"), value.get("c")


def _malformed(tag: Any, value: Any, exc: Exception) -> MalformedInput:
    return MalformedInput(None, f"malformed {tag} element {snippet(_dumps(value))}", exc)


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)
