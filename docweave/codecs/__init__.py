"""Format codecs, in the order the registry tries them."""

from docweave.codecs.base import (
    Codec,
    CodecOptions,
    DecodeOptions,
    EncodeOnlyCodec,
    EncodeOptions,
)
from docweave.codecs.dir import DirCodec
from docweave.codecs.dmagic import DemoMagicCodec
from docweave.codecs.json_codec import JsonCodec
from docweave.codecs.pandoc_codecs import (
    HtmlCodec,
    LatexCodec,
    MarkdownCodec,
    PandocCodec,
)
from docweave.codecs.rpng import RpngCodec
from docweave.codecs.txt import TxtCodec
from docweave.codecs.yaml_codec import YamlCodec

CODECS: list[Codec] = [
    JsonCodec(),
    YamlCodec(),
    PandocCodec(),
    MarkdownCodec(),
    LatexCodec(),
    HtmlCodec(),
    TxtCodec(),
    DirCodec(),
    RpngCodec(),
    DemoMagicCodec(),
]

__all__ = [
    "CODECS",
    "Codec",
    "CodecOptions",
    "DecodeOptions",
    "DemoMagicCodec",
    "DirCodec",
    "EncodeOnlyCodec",
    "EncodeOptions",
    "HtmlCodec",
    "JsonCodec",
    "LatexCodec",
    "MarkdownCodec",
    "PandocCodec",
    "RpngCodec",
    "TxtCodec",
    "YamlCodec",
]
