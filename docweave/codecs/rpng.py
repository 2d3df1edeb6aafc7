"""Rendered PNG: a screenshot of a node carrying the node's JSON.

The JSON is punycode escaped, so it fits the Latin-1 character set of a PNG
``tEXt`` chunk, and stored under the keyword ``JSON``. Decoding reads it back
without looking at the pixels.
"""

from __future__ import annotations

import io
import logging
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from PIL.PngImagePlugin import PngInfo

from docweave.browser import get_pool
from docweave.codecs.base import Codec, DecodeOptions, EncodeOptions
from docweave.errors import MalformedInput, MissingEmbeddedPayload, snippet
from docweave.model import Node, from_json, to_json
from docweave.vfile import VFile

logger = logging.getLogger(__name__)

KEYWORD = "JSON"

PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  body {{ margin: 0; font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif; }}
  #target {{ {style} }}
</style>
</head>
<body><div id="target">{html}</div></body>
</html>
"""


def escape(text: str) -> str:
    return text.encode("punycode").decode("ascii")


def unescape(text: str) -> str:
    return text.encode("ascii").decode("punycode")


def _open(image: bytes) -> Image.Image:
    try:
        return Image.open(io.BytesIO(image))
    except UnidentifiedImageError as e:
        raise MalformedInput(None, f"not an image ({snippet(image, 16)!r})", e) from e


def find(keyword: str, image: bytes) -> str | None:
    """Unescaped text of the chunk with ``keyword``, if there is one."""
    with _open(image) as im:
        text = getattr(im, "text", {})
        value = text.get(keyword)
    return unescape(value) if value is not None else None


def has(keyword: str, image: bytes) -> bool:
    return find(keyword, image) is not None


def extract(keyword: str, image: bytes, source: str | None = None) -> str:
    text = find(keyword, image)
    if text is None:
        raise MissingEmbeddedPayload(keyword, source)
    return text


def insert(keyword: str, text: str, image: bytes) -> bytes:
    """Store ``text`` under ``keyword``, replacing any existing chunk with that keyword."""
    with _open(image) as im:
        info = PngInfo()
        for key, value in getattr(im, "text", {}).items():
            if key != keyword:
                info.add_text(key, value)
        info.add_text(keyword, escape(text))
        output = io.BytesIO()
        im.save(output, format="PNG", pnginfo=info)
    return output.getvalue()


class RpngEncodeOptions(EncodeOptions):
    # Screenshot the whole page rather than just the rendered node
    is_standalone: bool = False


class RpngCodec(Codec):
    name = "rpng"
    media_types = ("image/vnd.docweave.rpng",)
    ext_names = ("rpng",)

    encode_options = RpngEncodeOptions

    async def sniff(self, content: str | Path) -> bool:
        path = Path(content) if isinstance(content, (str, Path)) else None
        if path is None or path.suffix.lower() != ".png":
            return False
        if not os.path.isfile(path):
            return False
        try:
            return has(KEYWORD, path.read_bytes())
        except MalformedInput:
            logger.debug("%s has a .png extension but is not an image", path)
            return False

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        source = str(file.path) if file.path else None
        text = extract(KEYWORD, file.data(), source)
        return from_json(text, source)

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        from docweave.registry import dump

        fragment = await dump(node, "html", is_standalone=False)
        style = "" if options.is_standalone else "display: inline-block; padding: 0.1rem"
        html = PAGE_TEMPLATE.format(style=style, html=fragment)

        async with get_pool().page() as page:
            await page.set_content(html, wait_until="networkidle")
            if options.is_standalone:
                screenshot = await page.screenshot(full_page=True, type="png")
            else:
                element = await page.query_selector("#target")
                if element is None:
                    raise MalformedInput(None, "rendered page has no #target element")
                screenshot = await element.screenshot(type="png")

        image = insert(KEYWORD, to_json(node), screenshot)
        logger.debug("Rendered %d byte rpng", len(image))
        return VFile(contents=image, path=Path(options.file_path) if options.file_path else None)
