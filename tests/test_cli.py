"""Tests for the command-line interface."""

import json

import pytest

from shortlinks.cli import build_parser, main


@pytest.fixture
def run_cli(tmp_path, capsys):
    """Run the CLI against a file store in tmp_path and return (code, stdout json)."""

    def run(*argv):
        code = main(["--storage-backend", "file", "--storage-path", str(tmp_path), *argv])
        out = capsys.readouterr().out
        return code, json.loads(out) if out.strip() else None

    return run


class TestCLI:
    """Test CLI commands end to end."""

    def test_shorten_then_resolve(self, run_cli):
        code, created = run_cli("shorten", "https://example.com/cli", "--custom-code", "cli123", "--validity", "10")
        assert code == 0
        assert created["short_code"] == "cli123"
        assert created["original_url"] == "https://example.com/cli"

        code, resolved = run_cli("resolve", "cli123", "--referrer", "https://ref.example")
        assert code == 0
        assert resolved["original_url"] == "https://example.com/cli"
        assert resolved["clicks"] == 1

        code, stats = run_cli("stats", "cli123")
        assert code == 0
        assert stats["clicks"] == 1
        assert stats["click_details"][0]["source"] == "https://ref.example"

    def test_list(self, run_cli):
        run_cli("shorten", "https://example.com/a")
        run_cli("shorten", "https://example.com/b")

        code, listing = run_cli("list")

        assert code == 0
        assert listing["count"] == 2

    def test_invalid_url_fails(self, run_cli, capsys):
        code, out = run_cli("shorten", "not-a-url")

        assert code == 1
        assert out is None

    def test_resolve_unknown(self, run_cli):
        code, out = run_cli("resolve", "nothere")

        assert code == 1
        assert out is None

    def test_health(self, run_cli):
        code, health = run_cli("health")

        assert code == 0
        assert health["health"]["overall"] is True
        assert health["statistics"]["storage"] == "file"

    def test_no_command(self, capsys):
        assert main([]) == 1

    def test_parser(self):
        args = build_parser().parse_args(["shorten", "https://example.com", "--validity", "5"])

        assert args.command == "shorten"
        assert args.validity == 5
        assert args.custom_code is None
