"""Canonical nodes as YAML."""

from __future__ import annotations

import yaml

from docweave.codecs.base import Codec, DecodeOptions, EncodeOptions
from docweave.errors import MalformedInput, snippet
from docweave.model import Node, dump_node, load_node
from docweave.vfile import VFile


class YamlCodec(Codec):
    name = "yaml"
    media_types = ("text/yaml", "application/x-yaml")
    ext_names = ("yaml", "yml")

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        source = str(file.path) if file.path else snippet(file.contents)
        try:
            value = yaml.safe_load(file.text())
        except yaml.YAMLError as e:
            raise MalformedInput(source, f"invalid YAML ({e})", e) from e
        return load_node(value, source)

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        text = yaml.safe_dump(
            dump_node(node),
            allow_unicode=True,
            sort_keys=False,
            default_flow_style=False,
        )
        return VFile(contents=text)
