"""Plain text: primitives in, flattened text out."""

from __future__ import annotations

import re

from pydantic import BaseModel

from docweave.codecs.base import Codec, DecodeOptions, EncodeOptions
from docweave.model import Node, dump_node
from docweave.vfile import VFile

_NUMBER = re.compile(r"^-?\d+\.?\d*$")


class TxtCodec(Codec):
    name = "txt"
    media_types = ("text/plain",)
    ext_names = ("txt", "text")

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        content = file.text()
        if content == "null":
            return None
        if content == "true":
            return True
        if content == "false":
            return False
        if _NUMBER.match(content):
            return float(content) if "." in content else int(content)
        return content

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        return VFile(contents=to_text(node))


def to_text(node: Node) -> str:
    """Flatten a node to space separated text, keys included for objects."""
    if isinstance(node, BaseModel):
        node = dump_node(node)
    if node is None:
        return "null"
    if isinstance(node, bool):
        return "true" if node else "false"
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return " ".join(to_text(item) for item in node)
    if isinstance(node, dict):
        return " ".join(f"{key} {to_text(value)}" for key, value in node.items())
    return str(node)
