"""Tests for CLI commands."""

import json
import pytest
from typer.testing import CliRunner

from intent_match import __version__
from intent_match.cli import app
from intent_match.config import CONFIG_ENV_VAR, THRESHOLD_ENV_VAR


runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv(THRESHOLD_ENV_VAR, raising=False)


@pytest.fixture
def tables(tmp_path):
    phrases = tmp_path / "phrases.json"
    phrases.write_text(json.dumps([
        {"key": "NOW", "text": "what time is it", "subject": "TIME", "item": "NOW"},
        {"key": "LIGHTS_ON", "text": "turn on the lights", "subject": "LIGHTS", "item": "ON"},
    ]), encoding="utf-8")

    corrections = tmp_path / "corrections.json"
    corrections.write_text(json.dumps({"dime": "time"}), encoding="utf-8")

    return phrases, corrections


class TestMain:
    """Tests for the root command."""

    def test_version(self):
        """Test --version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestResolveCommand:
    """Tests for 'intent-match resolve'."""

    def test_match(self, tables):
        """Test resolving a corrected utterance."""
        phrases, corrections = tables
        result = runner.invoke(app, ["resolve", "what's the dime", "-p", str(phrases), "-c", str(corrections)])

        assert result.exit_code == 0
        assert "NOW" in result.output
        assert "what's the time" in result.output

    def test_json_output(self, tables):
        """Test --json prints the flow message fields."""
        phrases, corrections = tables
        result = runner.invoke(
            app, ["resolve", "what time is it", "-p", str(phrases), "-c", str(corrections), "--json"]
        )

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "payload": "NOW",
            "intentType": "TIME",
            "item": "NOW",
            "confidence": 100,
        }

    def test_no_match(self, tables):
        """Test no match exits with status 1."""
        phrases, _ = tables
        result = runner.invoke(app, ["resolve", "play some jazz music", "-p", str(phrases)])

        assert result.exit_code == 1
        assert "No match" in result.output

    def test_no_match_json(self, tables):
        """Test no match prints null in JSON mode."""
        phrases, _ = tables
        result = runner.invoke(app, ["resolve", "", "-p", str(phrases), "--json"])

        assert result.exit_code == 1
        assert json.loads(result.output) is None

    def test_threshold_option(self, tables):
        """Test --threshold makes matching stricter."""
        phrases, _ = tables
        result = runner.invoke(app, ["resolve", "tell me the tiem", "-p", str(phrases), "-t", "0.1"])

        assert result.exit_code == 1

    def test_threshold_env(self, tables, monkeypatch):
        """Test the threshold environment override."""
        phrases, _ = tables
        monkeypatch.setenv(THRESHOLD_ENV_VAR, "0.1")
        result = runner.invoke(app, ["resolve", "tell me the tiem", "-p", str(phrases)])

        assert result.exit_code == 1

    def test_missing_phrases(self):
        """Test an error when no phrases file is configured."""
        result = runner.invoke(app, ["resolve", "what time is it"])

        assert result.exit_code == 2
        assert "No phrases file" in result.output

    def test_invalid_table(self, tmp_path):
        """Test an invalid table is reported, not raised."""
        phrases = tmp_path / "phrases.json"
        phrases.write_text(json.dumps([{"key": "NOW", "text": "what time is it"}]), encoding="utf-8")

        result = runner.invoke(app, ["resolve", "what time is it", "-p", str(phrases)])

        assert result.exit_code == 2
        assert "validation" in result.output

    def test_config_file(self, tables, tmp_path):
        """Test tables located through a config file."""
        config = tmp_path / "config.json"
        config.write_text(json.dumps({
            "phrases_file": "phrases.json",
            "corrections_file": "corrections.json",
        }), encoding="utf-8")

        result = runner.invoke(app, ["resolve", "what's the dime", "--config", str(config), "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["payload"] == "NOW"

    def test_config_from_env(self, tables, tmp_path, monkeypatch):
        """Test the config file environment variable."""
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"phrases_file": "phrases.json"}), encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config))

        result = runner.invoke(app, ["resolve", "turn on the lights", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["payload"] == "LIGHTS_ON"


class TestRankCommand:
    """Tests for 'intent-match rank'."""

    def test_rank(self, tables):
        """Test candidates are listed."""
        phrases, corrections = tables
        result = runner.invoke(app, ["rank", "what's the dime", "-p", str(phrases), "-c", str(corrections)])

        assert result.exit_code == 0
        assert "NOW" in result.output
        assert "LIGHTS_ON" in result.output

    def test_rank_limit(self, tables):
        """Test --limit trims the list."""
        phrases, _ = tables
        result = runner.invoke(app, ["rank", "turn on the lights", "-p", str(phrases), "-n", "1"])

        assert result.exit_code == 0
        assert "LIGHTS_ON" in result.output
        assert "NOW" not in result.output

    def test_rank_empty(self, tables):
        """Test ranking empty input."""
        phrases, _ = tables
        result = runner.invoke(app, ["rank", "", "-p", str(phrases)])

        assert result.exit_code == 0
        assert "Nothing to rank" in result.output


class TestNormalizeCommand:
    """Tests for 'intent-match normalize'."""

    def test_normalize(self, tables):
        """Test corrections are applied and listed."""
        _, corrections = tables
        result = runner.invoke(app, ["normalize", "what's the dime", "-c", str(corrections)])

        assert result.exit_code == 0
        assert "what's the time" in result.output
        assert "1 corrections" in result.output

    def test_normalize_without_table(self):
        """Test no table leaves input unchanged."""
        result = runner.invoke(app, ["normalize", "what's the dime"])

        assert result.exit_code == 0
        assert "what's the dime" in result.output
        assert "0 corrections" in result.output


class TestCheckCommand:
    """Tests for 'intent-match check'."""

    def test_check(self, tables):
        """Test a summary of valid tables."""
        phrases, corrections = tables
        result = runner.invoke(app, ["check", "-p", str(phrases), "-c", str(corrections)])

        assert result.exit_code == 0
        assert "2 phrases, 1 corrections" in result.output
        assert "TIME, LIGHTS" in result.output

    def test_check_invalid_corrections(self, tables, tmp_path):
        """Test an invalid correction rule is reported."""
        phrases, _ = tables
        corrections = tmp_path / "bad.json"
        corrections.write_text(json.dumps({"time": "time"}), encoding="utf-8")

        result = runner.invoke(app, ["check", "-p", str(phrases), "-c", str(corrections)])

        assert result.exit_code == 2
        assert "itself" in result.output


class TestErrorExitCodes:
    """Tests that unreadable input exits 2, never the no-match code."""

    def test_undecodable_phrases(self, tmp_path):
        """Test a phrases file that isn't UTF-8."""
        phrases = tmp_path / "phrases.json"
        phrases.write_bytes(b'[{"key": "\xff"}]')

        result = runner.invoke(app, ["resolve", "what time is it", "-p", str(phrases)])

        assert result.exit_code == 2
        assert "resource" in result.output

    def test_phrases_directory(self, tmp_path):
        """Test a directory passed as the phrases file."""
        result = runner.invoke(app, ["check", "-p", str(tmp_path)])

        assert result.exit_code == 2
        assert "resource" in result.output

    def test_config_not_an_object(self, tables, tmp_path):
        """Test a config file holding a JSON array."""
        phrases, _ = tables
        config = tmp_path / "config.json"
        config.write_text("[]", encoding="utf-8")

        result = runner.invoke(app, ["check", "-p", str(phrases), "--config", str(config)])

        assert result.exit_code == 2
        assert "configuration" in result.output

    def test_nan_threshold(self, tables):
        """Test a NaN threshold is rejected rather than matching everything."""
        phrases, _ = tables
        result = runner.invoke(app, ["resolve", "zzzz qqq", "-p", str(phrases), "-t", "nan"])

        assert result.exit_code == 2

    def test_threshold_above_range(self, tables):
        """Test a threshold above 1 is rejected."""
        phrases, _ = tables
        result = runner.invoke(app, ["resolve", "zzzz qqq", "-p", str(phrases), "-t", "1.5"])

        assert result.exit_code == 2

    @pytest.mark.parametrize("limit", ["0", "-1"])
    def test_rank_limit_below_one(self, tables, limit):
        """Test --limit must be at least 1."""
        phrases, _ = tables
        result = runner.invoke(app, ["rank", "turn on the lights", "-p", str(phrases), "-n", limit])

        assert result.exit_code == 2
