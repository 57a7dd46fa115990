"""Tests for the validate command."""
import io
import json
from unittest.mock import patch

from rich.console import Console
from typer.testing import CliRunner

from haguard.cli import app

from conftest import write_doc

runner = CliRunner()

BROKEN_AUTOMATIONS = """
- id: party
  actions:
    - action: script.sonos_group_all
    - action: script.old_script_name
"""


class TestValidateSafe:
    """Corpora without errors exit 0."""

    def test_clean_corpus(self, corpus_dir):
        result = runner.invoke(app, ["validate", "--config-dir", str(corpus_dir)])

        assert result.exit_code == 0
        assert "safe to deploy" in result.stdout
        assert "script_references" in result.stdout

    def test_warnings_do_not_block(self, corpus_dir):
        write_doc(corpus_dir, "dashboards/home.yaml", "cards:\n  - entity: light.nonexistent\n")

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir)])

        assert result.exit_code == 0
        assert "WARNING" in result.stdout
        assert "light.nonexistent" in result.stdout
        assert "1 warning" in result.stdout

    def test_config_dir_from_environment(self, corpus_dir):
        result = runner.invoke(app, ["validate"], env={"HAGUARD_CONFIG_DIR": str(corpus_dir)})

        assert result.exit_code == 0


class TestValidateUnsafe:
    """Errors block deployment unless the operator overrides."""

    def test_errors_exit_1(self, corpus_dir):
        write_doc(corpus_dir, "automations.yaml", BROKEN_AUTOMATIONS)

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir)])

        assert result.exit_code == 1
        assert "ERROR" in result.stdout
        assert "old_script_name" in result.stdout
        assert "Unsafe to deploy" in result.stdout

    def test_force_exits_0(self, corpus_dir):
        write_doc(corpus_dir, "automations.yaml", BROKEN_AUTOMATIONS)

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "--force"])

        assert result.exit_code == 0
        assert "--force" in result.stdout

    def test_ask_confirmed(self, corpus_dir):
        write_doc(corpus_dir, "automations.yaml", BROKEN_AUTOMATIONS)

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "--ask"], input="y\n")

        assert result.exit_code == 0
        assert "Continue anyway?" in result.stdout

    def test_ask_declined(self, corpus_dir):
        write_doc(corpus_dir, "automations.yaml", BROKEN_AUTOMATIONS)

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "--ask"], input="n\n")

        assert result.exit_code == 1


class TestValidateJson:
    """Machine readable output."""

    def test_json_report(self, corpus_dir):
        write_doc(corpus_dir, "automations.yaml", BROKEN_AUTOMATIONS)

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "--format", "json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["safe"] is False
        assert data["errors"] == 1
        assert data["findings"][0]["location"] == {"file": "automations.yaml", "line": 4}

    def test_json_clean(self, corpus_dir):
        result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "-f", "json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"safe": True, "errors": 0, "warnings": 0, "findings": []}

    def test_ask_prompt_keeps_stdout_json(self, corpus_dir):
        write_doc(corpus_dir, "automations.yaml", BROKEN_AUTOMATIONS)

        with patch("haguard.cli_support.typer.confirm", return_value=False) as confirm:
            result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "-f", "json", "--ask"])

        assert result.exit_code == 1
        assert confirm.call_args.kwargs["err"] is True
        assert json.loads(result.stdout)["errors"] == 1

    def test_unknown_format(self, corpus_dir):
        result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "--format", "xml"])

        assert result.exit_code == 2
        assert "Unknown format" in result.stdout


class TestValidateUnreadable:
    """Unreadable corpora and settings exit 2."""

    def test_missing_registry(self, corpus_dir):
        (corpus_dir / ".storage" / "core.entity_registry").unlink()

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir)])

        assert result.exit_code == 2
        assert "Corpus unreadable" in result.stdout

    def test_unparsable_document(self, corpus_dir):
        write_doc(corpus_dir, "scripts.yaml", "sonos_group_all: [unclosed\n")

        err_console = Console(file=io.StringIO(), record=True, width=120)

        with patch("haguard.cli_validate_commands.err_console", err_console):
            result = runner.invoke(app, ["validate", "-c", str(corpus_dir), "-f", "json"])

        assert result.exit_code == 2
        assert "Corpus unreadable" in err_console.export_text()
        assert "Corpus unreadable" not in result.stdout

    def test_missing_root(self, tmp_path):
        result = runner.invoke(app, ["validate", "-c", str(tmp_path / "nope")])

        assert result.exit_code == 2

    def test_invalid_settings(self, corpus_dir):
        write_doc(corpus_dir, "haguard.yml", "helpers:\n  input_color: .storage/input_color\n")

        result = runner.invoke(app, ["validate", "-c", str(corpus_dir)])

        assert result.exit_code == 2
        assert "Error" in result.stdout
