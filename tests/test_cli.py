"""Tests for the docweave command line."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from docweave.cli import app
from docweave.config.loader import DEFAULT_CONFIG_TEMPLATE

runner = CliRunner()


def _write_doc(path: Path) -> Path:
    path.write_text(json.dumps({"type": "Article", "content": [{"type": "ThematicBreak"}]}))
    return path


class TestConvert:
    def test_convert_to_file(self, tmp_path):
        source = _write_doc(tmp_path / "doc.json")
        target = tmp_path / "doc.yaml"
        result = runner.invoke(app, ["convert", str(source), str(target)])
        assert result.exit_code == 0, result.output
        assert "Written to" in result.output
        assert "type: ThematicBreak" in target.read_text()

    def test_convert_to_stdout(self, tmp_path):
        source = _write_doc(tmp_path / "doc.json")
        result = runner.invoke(app, ["convert", str(source), "--to", "txt"])
        assert result.exit_code == 0, result.output
        assert "type Article" in result.output

    def test_unknown_format(self, tmp_path):
        source = _write_doc(tmp_path / "doc.json")
        result = runner.invoke(app, ["convert", str(source), "--to", "docx"])
        assert result.exit_code == 1
        assert "docx" in result.output

    def test_malformed_input(self, tmp_path):
        source = tmp_path / "bad.json"
        source.write_text("{oops")
        result = runner.invoke(app, ["convert", str(source), str(tmp_path / "out.yaml")])
        assert result.exit_code == 1
        assert "Malformed input" in result.output


class TestFormats:
    def test_lists_codecs(self):
        result = runner.invoke(app, ["formats"])
        assert result.exit_code == 0
        for name in ("json", "yaml", "md", "dir", "rpng", "dmagic"):
            assert name in result.output


class TestConfigCommands:
    def test_init_writes_template(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 0
        assert (tmp_path / "docweave.yaml").read_text() == DEFAULT_CONFIG_TEMPLATE

    def test_init_refuses_to_overwrite(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "docweave.yaml").write_text("log_level: debug\n")
        result = runner.invoke(app, ["config", "init"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_bad_config_file(self, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("log_level: loud\n")
        result = runner.invoke(app, ["--config", str(bad), "formats"])
        assert result.exit_code == 1
        assert "Invalid config" in result.output

    def test_show(self, tmp_path):
        cfg = tmp_path / "c.yaml"
        cfg.write_text("dir:\n  format: md\n")
        result = runner.invoke(app, ["--config", str(cfg), "config", "show"])
        assert result.exit_code == 0
        assert "format: md" in result.output
