"""
Tests for the markdown command reference generator.
"""

import pytest

from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.tools import doc_generator


@pytest.fixture
def registry():
    return CommandRegistry()


class TestGeneration:
    """Markdown output."""

    def test_command_docs(self, registry):
        docs = doc_generator.generate_command_docs(registry.get("FIRE"))
        assert docs.startswith("### FIRE")
        assert "FIRE [<sort>] <target> [EXCEPT <ships>] AT <empires>" in docs
        assert "| `sort` | identifier | no | Sort order for firing (one of: ASC, DESC) |" in docs
        assert "- `FIRE (1,2) AT Empire1`" in docs

    def test_format_in_table(self, registry):
        docs = doc_generator.generate_command_docs(registry.get("MOVE"))
        assert "Format: (x,y) or location name" in docs

    def test_category_summary(self, registry):
        summary = doc_generator.generate_category_summary(registry)
        rows = summary.splitlines()[2:]
        assert len(rows) == 14
        assert rows[0].startswith("| combat | `FIRE` |")

    def test_all_docs_sections(self, registry):
        docs = doc_generator.generate_all_docs(registry)
        assert docs.startswith("# Star Empires Order Reference")
        assert docs.index("## Combat Commands") < docs.index("## Administration Commands")
        for name in registry.names():
            assert f"### {name}" in docs


class TestCli:
    """Command-line entry point."""

    def test_single_command(self, registry, capsys):
        doc_generator.main(["build"], registry)
        assert capsys.readouterr().out.startswith("### BUILD")

    def test_unknown_command(self, registry, capsys):
        with pytest.raises(SystemExit) as exc_info:
            doc_generator.main(["BIULD"], registry)
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Unknown command: BIULD" in out
        assert "BUILD" in out

    def test_no_arguments(self, capsys):
        with pytest.raises(SystemExit):
            doc_generator.main([])
        assert "Usage" in capsys.readouterr().out

    def test_check_current(self, registry, tmp_path):
        path = tmp_path / "COMMANDS.md"
        path.write_text(doc_generator.generate_all_docs(registry), encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            doc_generator.main(["--check", str(path)], registry)
        assert exc_info.value.code == 0

    def test_check_outdated(self, registry, tmp_path):
        path = tmp_path / "COMMANDS.md"
        path.write_text("# old reference\n", encoding="utf-8")
        assert not doc_generator.check_docs_current(registry, str(path))
        assert not doc_generator.check_docs_current(registry, str(tmp_path / "missing.md"))

    def test_check_unreadable(self, registry, tmp_path):
        path = tmp_path / "COMMANDS.md"
        path.write_bytes(b"\xff\xfe broken")
        assert not doc_generator.check_docs_current(registry, str(path))
        assert not doc_generator.check_docs_current(registry, str(tmp_path))
