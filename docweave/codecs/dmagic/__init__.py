"""Encode documents as demo-magic style Bash scripts.

Headings and paragraphs are typed out as comments and ``bash``/``sh`` code
blocks are typed and then run. Code block ``meta`` controls the script:
``hidden`` (empty value) runs the code without showing it and ``pause`` adds
a delay, in seconds, after it.
"""

from __future__ import annotations

import asyncio
from importlib import resources

from pydantic import BaseModel

from docweave.codecs.base import EncodeOnlyCodec, EncodeOptions
from docweave.model import CodeBlock, Heading, Node, Paragraph
from docweave.vfile import VFile

TEMPLATE_NAME = "demo-magic-template.sh"

# Read on first use; the event loop is single threaded so no lock is needed
_template: str | None = None


def template() -> str:
    global _template
    if _template is None:
        _template = resources.files(__package__).joinpath(TEMPLATE_NAME).read_text("utf-8")
    return _template


class DemoMagicOptions(EncodeOptions):
    # Prepend the Bash functions the script relies on
    embed: bool = True


class DemoMagicCodec(EncodeOnlyCodec):
    name = "dmagic"
    media_types = ("application/x-demo-magic",)
    ext_names = ("dmagic", "demo-magic")

    encode_options = DemoMagicOptions

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        bash = await encode_node(node)
        if getattr(options, "embed", True):
            bash = template() + bash
        return VFile(contents=bash)


async def encode_node(node: Node) -> str:
    match node:
        case Heading():
            return f'h {node.depth} "{await escaped_md(node)}"\n\n'
        case Paragraph():
            return f'p "# {await escaped_md(node)}"\n\n'
        case CodeBlock():
            return encode_code_block(node)
        case BaseModel():
            children = [value for _, value in node]
        case list():
            children = node
        case dict():
            children = list(node.values())
        case _:
            return ""
    parts = await asyncio.gather(*(encode_node(child) for child in children))
    return "".join(parts)


def encode_code_block(block: CodeBlock) -> str:
    if block.language and block.language not in ("bash", "sh"):
        return ""
    meta = block.meta or {}
    if meta.get("hidden") == "":
        return f"{block.value}\n"
    bash = f'pe "{_escape(block.value)}"\n'
    if meta.get("pause"):
        bash += f"z {meta['pause']}\n"
    return bash + "\n"


async def escaped_md(node: Node) -> str:
    from docweave.registry import dump

    markdown = await dump(node, "md")
    return _escape(markdown.strip())


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace('"', '\\"')
