"""Tests for the storymind CLI."""

import json

import pytest
from typer.testing import CliRunner

from storymind.cli import app
from storymind.config import load_config
from storymind.store import open_store

from .conftest import COFFEE_STORY

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated(isolated_xdg):
    return isolated_xdg


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "Storymind version" in result.output


class TestProcess:
    def test_process_inline_text(self):
        result = runner.invoke(app, ["process", "--text", COFFEE_STORY])

        assert result.exit_code == 0
        assert "Stored session" in result.output
        assert len(open_store().get_session_history()) == 1

    def test_process_file(self, tmp_path):
        story = tmp_path / "story.txt"
        story.write_text(COFFEE_STORY)

        result = runner.invoke(app, ["process", str(story), "--no-state"])

        assert result.exit_code == 0
        assert open_store().get_session_history()[0].story_text == COFFEE_STORY

    def test_process_stdin(self):
        result = runner.invoke(app, ["process", "-"], input=COFFEE_STORY)

        assert result.exit_code == 0
        assert open_store().get_session_history()[0].story_text == COFFEE_STORY

    def test_second_pass_reports_connections(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["process", "--text", COFFEE_STORY])

        assert result.exit_code == 0
        assert "Cross-Story Connections" in result.output

    def test_requires_input(self):
        result = runner.invoke(app, ["process"])

        assert result.exit_code == 1
        assert "Provide a story file" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["process", str(tmp_path / "missing.txt")])

        assert result.exit_code == 1
        assert "Failed to read" in result.output


class TestHistory:
    def test_list_empty(self):
        result = runner.invoke(app, ["history", "list"])

        assert result.exit_code == 0
        assert "No sessions stored yet" in result.output

    def test_list(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["history", "list"])

        assert result.exit_code == 0
        assert "Memory Sessions (1 stored)" in result.output

    def test_show_json(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        session_id = open_store().get_session_history()[0].id

        result = runner.invoke(app, ["history", "show", session_id, "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["id"] == session_id
        assert data["storyText"] == COFFEE_STORY
        assert "workingMemory" in data["memoryState"]

    def test_show_unknown_session(self):
        result = runner.invoke(app, ["history", "show", "session_missing"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestQueries:
    def test_connections_empty(self):
        result = runner.invoke(app, ["connections"])

        assert result.exit_code == 0
        assert "No cross-story connections yet" in result.output

    def test_connections(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["connections"])

        assert result.exit_code == 0
        assert "coffee" in result.output

    def test_stats(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "Sessions: 1" in result.output
        assert "Strongest connections" in result.output


class TestQueryCommand:
    def test_query_latest_session(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["query", "semantic", "coffee"])

        assert result.exit_code == 0
        assert "Semantic Memory (retrieve)" in result.output
        assert "coffee culture" in result.output

    def test_query_json(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        session_id = open_store().get_session_history()[0].id
        result = runner.invoke(app, ["query", "short_term", "capacity", "--session", session_id, "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["compartment"] == "short_term"
        assert data["query"] == "capacity"
        assert data["success"] is True
        assert data["items"][0].startswith("Current: ")

    def test_unknown_compartment(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["query", "dreams"])

        assert result.exit_code == 1
        assert "Unknown compartment" in result.output

    def test_no_sessions(self):
        result = runner.invoke(app, ["query", "semantic"])

        assert result.exit_code == 1
        assert "No sessions stored yet" in result.output

    def test_unknown_session(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["query", "flash", "--session", "session_missing"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestExportImport:
    def test_export_to_stdout(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["export"])

        assert result.exit_code == 0
        assert len(json.loads(result.stdout)["allSessions"]) == 1

    def test_export_clear_import(self, tmp_path):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        backup = tmp_path / "backup.json"

        assert runner.invoke(app, ["export", str(backup)]).exit_code == 0
        assert runner.invoke(app, ["clear", "--yes"]).exit_code == 0
        assert open_store().get_memory_statistics().total_sessions == 0

        result = runner.invoke(app, ["import", str(backup)])

        assert result.exit_code == 0
        assert "Imported 1 sessions" in result.output
        assert open_store().get_memory_statistics().total_sessions == 1

    def test_import_invalid_file(self, tmp_path):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        bad = tmp_path / "bad.json"
        bad.write_text("not json")

        result = runner.invoke(app, ["import", str(bad)])

        assert result.exit_code == 1
        assert "Invalid memory data" in result.output
        assert open_store().get_memory_statistics().total_sessions == 1

    def test_clear_aborted(self):
        runner.invoke(app, ["process", "--text", COFFEE_STORY])
        result = runner.invoke(app, ["clear"], input="n\n")

        assert result.exit_code == 1
        assert open_store().get_memory_statistics().total_sessions == 1


class TestConfigCommands:
    def test_show(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "Configuration file:" in result.output
        assert "max_sessions = 50" in result.output

    def test_set(self):
        result = runner.invoke(app, ["config", "set", "max_sessions", "10"])

        assert result.exit_code == 0
        assert load_config().max_sessions == 10

    def test_set_unknown_key(self):
        result = runner.invoke(app, ["config", "set", "no_such_setting", "1"])

        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_set_invalid_value(self):
        result = runner.invoke(app, ["config", "set", "max_sessions", "lots"])

        assert result.exit_code == 1
        assert "Invalid value" in result.output
        assert load_config().max_sessions == 50
