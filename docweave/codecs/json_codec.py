"""Canonical JSON, the model's own wire format."""

from __future__ import annotations

from pathlib import Path

from docweave.codecs.base import Codec, DecodeOptions, EncodeOptions
from docweave.errors import snippet
from docweave.model import Node, from_json, to_json
from docweave.vfile import VFile


class JsonCodec(Codec):
    name = "json"
    media_types = ("application/json",)
    ext_names = ("json",)

    async def sniff(self, content: str | Path) -> bool:
        if not isinstance(content, str):
            return False
        text = content.lstrip()
        return text.startswith("{") or text.startswith("[")

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        source = str(file.path) if file.path else snippet(file.contents)
        return from_json(file.text(), source)

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        return VFile(contents=to_json(node, indent=2))
