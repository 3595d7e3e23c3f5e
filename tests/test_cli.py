import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from raml_parser.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCliRoutes:
    def test_routes(self):
        runner = CliRunner()
        result = runner.invoke(main, ["routes", str(FIXTURES / "music.raml")])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == "GET /songs"
        assert "GET /songs/{songId}/file-content" in lines
        assert len(lines) == 5

    def test_invalid_document(self, tmp_path):
        doc = tmp_path / "broken.raml"
        doc.write_text("#%RAML 1.0\nversion: v1\n", encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(main, ["routes", str(doc)])

        assert result.exit_code != 0
        assert "no title" in result.output

    def test_missing_file(self):
        runner = CliRunner()
        result = runner.invoke(main, ["routes", "does-not-exist.raml"])
        assert result.exit_code != 0


class TestCliResource:
    def test_resource_lookup(self):
        runner = CliRunner()
        result = runner.invoke(main, ["resource", str(FIXTURES / "music.raml"), "/songs/42?expand=1"])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["/songs/{songId} (/songs/{songId})", "  GET"]

    def test_resource_not_found(self):
        runner = CliRunner()
        result = runner.invoke(main, ["resource", str(FIXTURES / "music.raml"), "/albums"])

        assert result.exit_code != 0
        assert "/albums" in result.output


class TestCliTypes:
    def test_types(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--log-level", "debug", "types", str(FIXTURES / "music.raml")])

        assert result.exit_code == 0
        assert "Song: object" in result.output
        assert "Single: object (extends Song)" in result.output
        assert "Songs: array" in result.output
