"""Formats handled by the pandoc engine and the AST bridge.

The ``pandoc`` codec reads and writes the engine's JSON AST directly. The
text formats (Markdown, LaTeX, HTML) round trip through the engine: text is
converted to the JSON AST and mapped by the bridge, and the inverse on encode.
"""

from __future__ import annotations

import json
import logging

from docweave.codecs.base import Codec, DecodeOptions, EncodeOptions
from docweave.config import get_config
from docweave.errors import MalformedInput, snippet
from docweave.model import Node, as_article
from docweave.pandoc import engine
from docweave.pandoc.bridge import from_external, to_external
from docweave.vfile import VFile

logger = logging.getLogger(__name__)


class PandocOptions(DecodeOptions):
    extra_args: list[str] = []


class PandocEncodeOptions(EncodeOptions):
    extra_args: list[str] = []


def _source(file: VFile) -> str:
    return str(file.path) if file.path else snippet(file.contents)


class PandocCodec(Codec):
    """The engine's JSON AST as a file format."""

    name = "pandoc"
    media_types = ("application/vnd.pandoc+json",)
    ext_names = ("pandoc",)

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        try:
            pdoc = json.loads(file.text())
        except json.JSONDecodeError as e:
            raise MalformedInput(_source(file), f"invalid JSON ({e.msg})", e) from e
        return from_external(pdoc)

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        return VFile(contents=json.dumps(to_external(node), ensure_ascii=False))


class PandocTextCodec(Codec):
    """Base for text formats converted by the engine."""

    # Format names as pandoc knows them
    reader: str
    writer: str
    # Whether encoding always asks the engine for a standalone document
    always_standalone: bool = False

    decode_options = PandocOptions
    encode_options = PandocEncodeOptions

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        extra_args = [*get_config().pandoc.extra_args, *getattr(options, "extra_args", [])]
        output = await engine.convert(
            file.text(), to=engine.AST_FORMAT, from_=self.reader, extra_args=extra_args
        )
        try:
            pdoc = json.loads(output)
        except json.JSONDecodeError as e:
            raise MalformedInput(_source(file), f"unreadable engine output ({e.msg})", e) from e
        return from_external(pdoc)

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        article = as_article(node)
        extra_args = [*get_config().pandoc.extra_args, *getattr(options, "extra_args", [])]
        if self.always_standalone or options.is_standalone:
            extra_args.append("--standalone")
        pdoc = json.dumps(to_external(article), ensure_ascii=False)
        output = await engine.convert(
            pdoc, to=self.writer, from_=engine.AST_FORMAT, extra_args=extra_args
        )
        return VFile(contents=output)


class MarkdownCodec(PandocTextCodec):
    name = "md"
    media_types = ("text/markdown", "text/x-markdown")
    ext_names = ("md", "markdown")
    # Images alone in a paragraph stay inline instead of becoming figures
    reader = "markdown-implicit_figures"
    writer = "markdown"
    # Metadata is only written as YAML front matter in standalone mode
    always_standalone = True


class LatexCodec(PandocTextCodec):
    name = "latex"
    media_types = ("application/x-latex",)
    ext_names = ("tex", "latex")
    reader = "latex"
    writer = "latex"


class HtmlCodec(PandocTextCodec):
    name = "html"
    media_types = ("text/html",)
    ext_names = ("html", "htm")
    reader = "html"
    writer = "html"
