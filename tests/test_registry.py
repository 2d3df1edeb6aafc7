"""Tests for docweave.registry: codec resolution and entry points."""

import json
from pathlib import Path

import pytest

from docweave.codecs import CODECS, Codec, DecodeOptions, EncodeOptions
from docweave.errors import CodecNotFound, UnsupportedOperation
from docweave.model import Article, Paragraph
from docweave.registry import (
    CodecRegistry,
    convert,
    dump,
    load,
    match,
    read,
    write,
)
from docweave.vfile import VFile


class _FakeCodec(Codec):
    """Accepts anything starting with a marker."""

    name = "fake"
    media_types = ("application/x-fake",)
    ext_names = ("fake", "fk")

    def __init__(self, marker="FAKE:"):
        self.marker = marker
        self.seen_options = None

    async def sniff(self, content):
        return isinstance(content, str) and content.startswith(self.marker)

    async def decode(self, file, options):
        self.seen_options = options
        return file.text()[len(self.marker):]

    async def encode(self, node, options):
        self.seen_options = options
        return VFile(contents=f"{self.marker}{node}")


class _OtherCodec(_FakeCodec):
    name = "other"
    media_types = ("application/x-fake",)
    ext_names = ("fake",)


class _CsvCodec(_FakeCodec):
    name = "csv"
    media_types = ("text/csv",)
    ext_names = ()


# ── Resolution ─────────────────────────────────────────────────────


class TestMatch:
    def test_registration_order(self):
        assert [codec.name for codec in CODECS] == [
            "json", "yaml", "pandoc", "md", "latex", "html", "txt", "dir", "rpng", "dmagic",
        ]

    @pytest.mark.asyncio
    async def test_explicit_format_by_name_ext_or_media_type(self):
        assert (await match(format="md")).name == "md"
        assert (await match(format="markdown")).name == "md"
        assert (await match(format="text/html")).name == "html"
        assert (await match("notes.txt", format="yaml")).name == "yaml"

    @pytest.mark.asyncio
    async def test_extension(self):
        assert (await match("a/b/report.tex")).name == "latex"
        assert (await match(Path("data.YML"))).name == "yaml"

    @pytest.mark.asyncio
    async def test_directory_resolves_to_dir(self, tmp_path):
        assert (await match(tmp_path)).name == "dir"

    @pytest.mark.asyncio
    async def test_media_type(self):
        assert (await match(media_type="application/x-latex")).name == "latex"

    @pytest.mark.asyncio
    async def test_media_type_guessed_from_path(self):
        registry = CodecRegistry([_CsvCodec()])
        assert (await registry.match("table.csv")).name == "csv"

    @pytest.mark.asyncio
    async def test_sniff_used_last(self):
        registry = CodecRegistry([_FakeCodec()])
        assert (await registry.match("FAKE:payload")).name == "fake"

    @pytest.mark.asyncio
    async def test_first_registered_wins_ties(self):
        registry = CodecRegistry([_OtherCodec(), _FakeCodec()])
        assert (await registry.match("doc.fake")).name == "other"
        assert (await registry.match(media_type="application/x-fake")).name == "other"

    @pytest.mark.asyncio
    async def test_unknown_format(self):
        with pytest.raises(CodecNotFound) as exc_info:
            await match(format="docx")
        assert exc_info.value.target == "docx"
        assert isinstance(exc_info.value, UnsupportedOperation)

    @pytest.mark.asyncio
    async def test_nothing_matches(self):
        with pytest.raises(CodecNotFound):
            await CodecRegistry([_FakeCodec()]).match("no-marker-here")


# ── Options ────────────────────────────────────────────────────────


class TestOptions:
    def test_unknown_keys_ignored(self):
        opts = EncodeOptions.coerce({"is_standalone": False, "shiny": True})
        assert opts.is_standalone is False
        assert not hasattr(opts, "shiny")

    def test_none_gives_defaults(self):
        assert DecodeOptions.coerce(None) == DecodeOptions()

    @pytest.mark.asyncio
    async def test_codec_receives_coerced_options(self):
        codec = _FakeCodec()
        registry = CodecRegistry([codec])
        await registry.dump("x", "fake", {"is_standalone": False, "unknown": 1})
        assert isinstance(codec.seen_options, EncodeOptions)
        assert codec.seen_options.is_standalone is False


# ── Entry points ───────────────────────────────────────────────────


class TestEntryPoints:
    @pytest.mark.asyncio
    async def test_load_and_dump(self):
        node = await load('{"type": "Paragraph", "content": ["hi"]}', "json")
        assert node == Paragraph(content=["hi"])
        text = await dump(node, "yaml")
        assert "type: Paragraph" in text

    @pytest.mark.asyncio
    async def test_read_path_and_content(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps({"type": "Article", "content": []}))
        assert await read(path) == Article()
        assert await read(str(path)) == Article()
        assert await read('{"type": "Article"}', "json") == Article()

    @pytest.mark.asyncio
    async def test_read_sniffs_json_content(self):
        assert await read('{"type": "Article"}') == Article()

    @pytest.mark.asyncio
    async def test_write_uses_extension(self, tmp_path):
        path = tmp_path / "out" / "doc.yaml"
        file = await write(Article(title="T"), path)
        assert file.path == path
        assert "title: T" in path.read_text()

    @pytest.mark.asyncio
    async def test_convert_between_files(self, tmp_path):
        source = tmp_path / "doc.yaml"
        source.write_text("type: Article\ncontent:\n  - type: ThematicBreak\n")
        target = tmp_path / "doc.json"
        result = await convert(source, target)
        assert result == str(target)
        assert json.loads(target.read_text()) == {
            "type": "Article",
            "content": [{"type": "ThematicBreak"}],
        }

    @pytest.mark.asyncio
    async def test_convert_to_text(self, tmp_path):
        source = tmp_path / "doc.json"
        source.write_text('{"type": "Paragraph", "content": ["a", "b"]}')
        assert await convert(source, to_format="txt") == "type Paragraph content a b"
