"""Canonical document model shared by every codec."""

from docweave.model.nodes import (
    BLOCK_TYPES,
    INLINE_TYPES,
    NODE_CLASSES,
    Article,
    BlockContent,
    Code,
    CodeBlock,
    CodeChunk,
    Collection,
    CreativeWork,
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
    TableCell,
    TableRow,
    ThematicBreak,
    as_article,
    dump_node,
    from_json,
    is_block,
    is_creative_work,
    is_inline,
    load_node,
    node_type,
    to_json,
)

__all__ = [
    "Article",
    "BLOCK_TYPES",
    "BlockContent",
    "Code",
    "CodeBlock",
    "CodeChunk",
    "Collection",
    "CreativeWork",
    "Delete",
    "Emphasis",
    "Entity",
    "Heading",
    "INLINE_TYPES",
    "ImageObject",
    "InlineContent",
    "Link",
    "List",
    "ListItem",
    "NODE_CLASSES",
    "Node",
    "Paragraph",
    "Quote",
    "QuoteBlock",
    "Strong",
    "Table",
    "TableCell",
    "TableRow",
    "ThematicBreak",
    "as_article",
    "dump_node",
    "from_json",
    "is_block",
    "is_creative_work",
    "is_inline",
    "load_node",
    "node_type",
    "to_json",
]
