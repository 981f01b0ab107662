"""
Smoke Tests for CLI Commands.

These tests run the Typer app in-process against a temporary database and
catalog. They check that commands run and print the key lines; the engine
itself is covered by the unit tests.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import re

import pytest
from loguru import logger
from typer.testing import CliRunner

from config import get_settings
from sprout.cli.main import app

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch, sample_catalog):
    """Point settings at a fresh database and the sample catalog."""
    monkeypatch.setenv("STATE_DB_PATH", str(tmp_path / "state.db"))
    monkeypatch.setenv("CATALOG_PATH", str(sample_catalog))
    monkeypatch.setenv("DEFAULT_LEARNER_ID", "asha")
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    monkeypatch.delenv("LOG_FILE", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    logger.remove()


def invoke(*args: str):
    return runner.invoke(app, list(args))


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        result = invoke("--help")

        assert result.exit_code == 0
        for command in ("plan", "answer", "reveal", "end-session", "stats", "level", "reset"):
            assert command in result.output

    def test_answer_help(self):
        result = invoke("answer", "--help")

        assert result.exit_code == 0
        assert "--correct" in result.output


class TestPlan:
    def test_fresh_learner_gets_new_items(self):
        result = invoke("plan", "--subject", "kannada")

        assert result.exit_code == 0, result.output
        assert "Selected 3 words for kannada (Level 1)" in result.output
        assert "amma" in result.output
        assert "Practice Set" in result.output

    def test_unknown_subject_is_empty(self):
        result = invoke("plan", "--subject", "hindi")

        assert result.exit_code == 0
        assert "No words available for hindi" in result.output

    def test_size_option(self):
        result = invoke("plan", "--subject", "kannada", "--size", "1")

        assert result.exit_code == 0
        assert "Selected 1 words" in result.output

    def test_missing_catalog_fails(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CATALOG_PATH", str(tmp_path / "missing"))
        get_settings.cache_clear()

        result = invoke("plan", "--subject", "kannada")

        assert result.exit_code == 1
        assert "Catalog path not found" in result.output


class TestAnswerAndReveal:
    def test_first_wrong_answer(self):
        result = invoke("answer", "kn-001", "--wrong")

        assert result.exit_code == 0, result.output
        assert "Let's try this together" in result.output

    def test_two_correct_answers_master(self):
        invoke("answer", "kn-001", "--correct")
        result = invoke("answer", "kn-001", "--correct")

        assert result.exit_code == 0
        assert "Mastered!" in result.output
        assert "this one is mastered" in result.output

    def test_mastered_item_leaves_the_plan(self):
        invoke("answer", "kn-001", "--correct")
        invoke("answer", "kn-001", "--correct")

        result = invoke("plan", "--subject", "kannada")

        assert "Selected 2 words" in result.output
        assert "kn-001" not in result.output

    def test_unknown_item_fails(self):
        result = invoke("answer", "kn-999", "--correct")

        assert result.exit_code == 1
        assert "Unknown item" in result.output

    def test_blank_learner_fails(self):
        result = invoke("answer", "kn-001", "--correct", "--learner", " ")

        assert result.exit_code == 1
        assert "cannot be empty" in result.output

    def test_reveal(self):
        result = invoke("reveal", "kn-002")

        assert result.exit_code == 0
        assert "1 reveals" in result.output
        assert "Ready when you are" in result.output


class TestSessionsAndLevels:
    def _master_level_one(self):
        for item_id in ("kn-001", "kn-002", "kn-003"):
            invoke("answer", item_id, "--correct")
            invoke("answer", item_id, "--correct")

    def test_end_session_after_mastering_level(self):
        self._master_level_one()

        result = invoke("end-session", "--subject", "kannada")

        assert result.exit_code == 0, result.output
        assert "3 items moved closer to revision" in result.output
        assert "All questions mastered" in result.output

    def test_level_advance(self):
        assert "level 1" in invoke("level", "--subject", "kannada").output

        result = invoke("level", "--subject", "kannada", "--advance")

        assert result.exit_code == 0
        assert "level 2" in result.output
        assert "shaale" in invoke("plan", "--subject", "kannada").output


class TestStatsAndReset:
    def test_stats(self):
        invoke("answer", "kn-001", "--wrong")
        invoke("answer", "kn-001", "--correct")
        invoke("answer", "kn-001", "--correct")

        result = invoke("stats")

        assert result.exit_code == 0, result.output
        assert "Items mastered" in result.output
        assert "Turnarounds" in result.output
        assert "Kannada" in result.output

    def test_stats_for_subject(self):
        invoke("answer", "kn-001", "--correct")

        result = invoke("stats", "--subject", "kannada")

        assert result.exit_code == 0

    def test_todays_attempts_follow_the_subject_filter(self, tmp_path, monkeypatch, sample_catalog):
        (tmp_path / "math.json").write_text(
            json.dumps({"subject": "math", "items": [{"id": "m-001", "text": "2+2"}]}),
            encoding="utf-8",
        )
        monkeypatch.setenv("CATALOG_PATH", str(tmp_path))
        get_settings.cache_clear()
        invoke("answer", "kn-001", "--correct")
        invoke("answer", "kn-002", "--wrong")
        invoke("answer", "m-001", "--correct")

        everything = invoke("stats")
        kannada = invoke("stats", "--subject", "kannada")
        math = invoke("stats", "--subject", "math")

        assert re.search(r"Attempts today\D+(\d+)", everything.output).group(1) == "3"
        assert re.search(r"Attempts today\D+(\d+)", kannada.output).group(1) == "2"
        assert re.search(r"Attempts today\D+(\d+)", math.output).group(1) == "1"

    def test_reset_with_yes(self):
        invoke("answer", "kn-001", "--correct")

        result = invoke("reset", "--yes")

        assert result.exit_code == 0
        assert "Removed 1 items" in result.output

    def test_reset_can_be_cancelled(self):
        invoke("answer", "kn-001", "--correct")

        result = runner.invoke(app, ["reset"], input="n\n")

        assert "Cancelled" in result.output
        assert "Struggling" in invoke("plan", "--subject", "kannada").output
