"""Tests for the rpng codec: JSON embedded in PNG text chunks."""

import io
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from PIL import Image

from docweave.codecs import rpng
from docweave.codecs.rpng import KEYWORD, RpngCodec, RpngEncodeOptions
from docweave.errors import MalformedInput, MissingEmbeddedPayload
from docweave.model import Article, Heading, Paragraph, to_json
from docweave.registry import match, read, write
from docweave.vfile import VFile


def _text_chunks(image: bytes) -> dict:
    with Image.open(io.BytesIO(image)) as im:
        return dict(im.text)


# ── Chunk helpers ──────────────────────────────────────────────────


class TestChunks:
    def test_insert_then_extract(self, png_bytes):
        image = rpng.insert("K", "some text", png_bytes)
        assert rpng.extract("K", image) == "some text"

    def test_insert_twice_leaves_one_chunk(self, png_bytes):
        image = rpng.insert("K", "first", png_bytes)
        image = rpng.insert("K", "second", image)
        assert rpng.extract("K", image) == "second"
        assert list(_text_chunks(image)).count("K") == 1

    def test_other_chunks_are_kept(self, png_bytes):
        image = rpng.insert("Author", "Jane", png_bytes)
        image = rpng.insert(KEYWORD, "{}", image)
        assert rpng.extract("Author", image) == "Jane"

    def test_non_ascii_text_is_escaped(self, png_bytes):
        text = '{"content": ["Grüße ☒ 日本"]}'
        image = rpng.insert(KEYWORD, text, png_bytes)
        assert rpng.extract(KEYWORD, image) == text
        assert _text_chunks(image)[KEYWORD].isascii()

    def test_has(self, png_bytes):
        assert not rpng.has(KEYWORD, png_bytes)
        assert rpng.has(KEYWORD, rpng.insert(KEYWORD, "x", png_bytes))

    def test_extract_missing_keyword(self, png_bytes):
        with pytest.raises(MissingEmbeddedPayload) as exc_info:
            rpng.extract(KEYWORD, png_bytes, source="plain.png")
        assert exc_info.value.keyword == KEYWORD
        assert "plain.png" in str(exc_info.value)

    def test_not_an_image(self):
        with pytest.raises(MalformedInput):
            rpng.find(KEYWORD, b"definitely not a png")


# ── Sniffing and decoding ──────────────────────────────────────────


class TestDecode:
    @pytest.fixture
    def node(self):
        return Article(content=[Heading(content=["Rendered"])])

    @pytest.fixture
    def rpng_file(self, tmp_path, png_bytes, node):
        path = tmp_path / "figure.png"
        path.write_bytes(rpng.insert(KEYWORD, to_json(node), png_bytes))
        return path

    @pytest.mark.asyncio
    async def test_sniff(self, rpng_file, tmp_path, png_bytes):
        plain = tmp_path / "plain.png"
        plain.write_bytes(png_bytes)
        codec = RpngCodec()
        assert await codec.sniff(rpng_file)
        assert not await codec.sniff(plain)
        assert not await codec.sniff(tmp_path / "missing.png")
        assert not await codec.sniff("figure.jpg")

    @pytest.mark.asyncio
    async def test_registry_sniffs_png(self, rpng_file, node):
        assert (await match(rpng_file)).name == "rpng"
        assert await read(rpng_file) == node

    @pytest.mark.asyncio
    async def test_decode_without_chunk(self, tmp_path, png_bytes):
        with pytest.raises(MissingEmbeddedPayload):
            await RpngCodec().decode(VFile(contents=png_bytes), None)


# ── Encoding with a mocked browser ─────────────────────────────────


def _mock_pool(screenshot: bytes):
    page = MagicMock()
    page.set_content = AsyncMock()
    page.screenshot = AsyncMock(return_value=screenshot)
    element = MagicMock()
    element.screenshot = AsyncMock(return_value=screenshot)
    page.query_selector = AsyncMock(return_value=element)

    pool = MagicMock()
    pool.released = 0

    @asynccontextmanager
    async def _page():
        try:
            yield page
        finally:
            pool.released += 1

    pool.page = _page
    return pool, page, element


class TestEncode:
    @pytest.mark.asyncio
    async def test_encode_embeds_json(self, png_bytes):
        node = Paragraph(content=["Hello"])
        pool, page, element = _mock_pool(png_bytes)
        with (
            patch("docweave.codecs.rpng.get_pool", return_value=pool),
            patch("docweave.registry.dump", AsyncMock(return_value="<p>Hello</p>")),
        ):
            file = await RpngCodec().encode(node, RpngEncodeOptions())

        html = page.set_content.call_args.args[0]
        assert "<p>Hello</p>" in html
        assert 'id="target"' in html
        element.screenshot.assert_awaited_once()
        page.screenshot.assert_not_awaited()
        assert pool.released == 1
        assert rpng.extract(KEYWORD, file.contents) == to_json(node)

    @pytest.mark.asyncio
    async def test_standalone_takes_full_page(self, png_bytes):
        pool, page, element = _mock_pool(png_bytes)
        with (
            patch("docweave.codecs.rpng.get_pool", return_value=pool),
            patch("docweave.registry.dump", AsyncMock(return_value="<p>x</p>")),
        ):
            await RpngCodec().encode("x", RpngEncodeOptions(is_standalone=True))
        page.screenshot.assert_awaited_once()
        element.screenshot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_page_released_on_failure(self, png_bytes):
        pool, page, _ = _mock_pool(png_bytes)
        page.set_content.side_effect = RuntimeError("render crashed")
        with (
            patch("docweave.codecs.rpng.get_pool", return_value=pool),
            patch("docweave.registry.dump", AsyncMock(return_value="<p>x</p>")),
        ):
            with pytest.raises(RuntimeError):
                await RpngCodec().encode("x", RpngEncodeOptions())
        assert pool.released == 1

    @pytest.mark.asyncio
    async def test_write_then_read(self, tmp_path, png_bytes):
        node = Article(content=[Paragraph(content=["round trip"])])
        pool, _, _ = _mock_pool(png_bytes)
        path = tmp_path / "doc.rpng"
        with (
            patch("docweave.codecs.rpng.get_pool", return_value=pool),
            patch("docweave.registry.dump", AsyncMock(return_value="<p>round trip</p>")),
        ):
            await write(node, path)
        assert await read(path) == node
