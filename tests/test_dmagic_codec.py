"""Tests for the demo-magic script codec."""

from unittest.mock import AsyncMock, patch

import pytest

from docweave.codecs import dmagic
from docweave.codecs.dmagic import DemoMagicCodec, DemoMagicOptions, encode_code_block
from docweave.errors import UnsupportedOperation
from docweave.model import Article, CodeBlock, Heading, Paragraph
from docweave.registry import dump
from docweave.vfile import VFile


async def _fake_markdown(node, format):
    if isinstance(node, Heading):
        return "#" * node.depth + " " + node.content[0] + "\n"
    return node.content[0] + "\n"


@pytest.fixture
def fake_markdown():
    with patch("docweave.registry.dump", AsyncMock(side_effect=_fake_markdown)) as mock:
        yield mock


class TestCodeBlocks:
    def test_bash_block_is_typed_and_run(self):
        assert encode_code_block(CodeBlock(value="ls -la", language="bash")) == 'pe "ls -la"\n\n'

    def test_unlabelled_block_is_treated_as_bash(self):
        assert encode_code_block(CodeBlock(value="pwd")) == 'pe "pwd"\n\n'

    def test_other_languages_skipped(self):
        assert encode_code_block(CodeBlock(value="print(1)", language="python")) == ""

    def test_hidden_block_runs_silently(self):
        block = CodeBlock(value="export X=1", language="sh", meta={"hidden": ""})
        assert encode_code_block(block) == "export X=1\n"

    def test_pause(self):
        block = CodeBlock(value="make", language="bash", meta={"pause": "3"})
        assert encode_code_block(block) == 'pe "make"\nz 3\n\n'

    def test_quotes_and_backticks_escaped(self):
        block = CodeBlock(value='echo "`date`"', language="bash")
        assert encode_code_block(block) == 'pe "echo \\"\\`date\\`\\""\n\n'


class TestEncode:
    @pytest.mark.asyncio
    async def test_script_without_template(self, fake_markdown):
        article = Article(
            content=[
                Heading(depth=2, content=["Setup"]),
                Paragraph(content=["Install the `tool` first."]),
                CodeBlock(value="pip install tool", language="bash"),
            ]
        )
        file = await DemoMagicCodec().encode(article, DemoMagicOptions(embed=False))
        assert file.contents == (
            'h 2 "## Setup"\n\n'
            'p "# Install the \\`tool\\` first."\n\n'
            'pe "pip install tool"\n\n'
        )

    @pytest.mark.asyncio
    async def test_template_prepended_once(self, fake_markdown):
        first = await DemoMagicCodec().encode(Article(), DemoMagicOptions())
        assert first.contents.startswith("#!/usr/bin/env bash")
        assert "pe() {" in first.contents
        assert dmagic.template() is dmagic.template()

    @pytest.mark.asyncio
    async def test_via_registry(self, fake_markdown):
        text = await dump(Article(content=[Heading(depth=1, content=["Hi"])]), "dmagic", {"embed": False})
        assert text == 'h 1 "# Hi"\n\n'

    @pytest.mark.asyncio
    async def test_decode_not_supported(self):
        with pytest.raises(UnsupportedOperation):
            await DemoMagicCodec().decode(VFile(contents="h 1 x"), None)
