"""
Tests for the click command line interface.
"""

import json

import pytest
from click.testing import CliRunner

from council.cli import main


COUNCIL_YAML = """
name: cli-council
strategy: single
lead_provider: lead
providers:
  lead:
    kind: mock
    responses: ["Forecast: sunny"]
experts:
  - name: Weather Expert
    domain: weather
    keywords: [weather, forecast]
    tools: [weather]
  - name: Math Expert
    domain: math
    keywords: [calculate]
"""


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "council.yaml"
    path.write_text(COUNCIL_YAML)
    return path


class TestDemo:

    def test_demo_answers_offline(self, runner):
        result = runner.invoke(main, ["demo", "What's the weather forecast? Also calculate 15 * 23"])

        assert result.exit_code == 0, result.output
        assert "Weather Expert" in result.output
        assert "Math Expert" in result.output

    def test_demo_no_match_fails_cleanly(self, runner):
        result = runner.invoke(main, ["demo", "zzz", "-s", "parallel"])

        assert result.exit_code == 1
        assert "no suitable experts found" in result.output


class TestAsk:

    def test_ask_json(self, runner, config_file):
        result = runner.invoke(main, ["ask", "weather today?", "-c", str(config_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["content"] == "Forecast: sunny"
        assert data["experts"] == ["Weather Expert"]
        assert data["synthesized"] is False

    def test_ask_strategy_override(self, runner, config_file):
        result = runner.invoke(
            main, ["ask", "weather and calculate", "-c", str(config_file), "-s", "parallel", "--json"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        # math matches its only keyword, so it outranks weather
        assert data["experts"] == ["Math Expert", "Weather Expert"]
        assert data["path"] == "composed"
        assert data["content"] == "Forecast: sunny"

    def test_ask_unknown_strategy_in_file(self, runner, tmp_path):
        path = tmp_path / "council.yaml"
        path.write_text(COUNCIL_YAML.replace("strategy: single", "strategy: paralel"))

        result = runner.invoke(main, ["ask", "weather?", "-c", str(path)])

        assert result.exit_code == 1
        assert "Unknown strategy" in result.output

    def test_ask_missing_config(self, runner, tmp_path):
        result = runner.invoke(main, ["ask", "hi", "-c", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestRoute:

    def test_route_demo_council(self, runner):
        result = runner.invoke(main, ["route", "calculate the sum"])

        assert result.exit_code == 0, result.output
        assert "Math Expert" in result.output
        assert "Weather Expert" in result.output


class TestCheck:

    def test_check_valid(self, runner, config_file):
        result = runner.invoke(main, ["check", "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Configuration valid" in result.output

    def test_check_invalid(self, runner, tmp_path):
        path = tmp_path / "council.yaml"
        path.write_text("name: empty\n")

        result = runner.invoke(main, ["check", "-c", str(path)])

        assert result.exit_code == 1
        assert "No experts configured" in result.output

    @pytest.mark.parametrize("yaml_text", [
        "strategy: paralel\n",
        "providers:\n  main:\n    kind: palm\n",
    ])
    def test_check_bad_value_fails_cleanly(self, runner, tmp_path, yaml_text):
        path = tmp_path / "council.yaml"
        path.write_text(yaml_text)

        result = runner.invoke(main, ["check", "-c", str(path)])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error" in result.output


class TestExperts:

    def test_list(self, runner, config_file):
        result = runner.invoke(main, ["experts", "list", "-c", str(config_file)])
        assert result.exit_code == 0, result.output
        assert "Weather Expert" in result.output
        assert "Math Expert" in result.output

    def test_create(self, runner, tmp_path):
        output = tmp_path / "experts"

        result = runner.invoke(main, ["experts", "create", "travel", "-d", "travel", "-o", str(output)])

        assert result.exit_code == 0, result.output
        created = (output / "travel.yaml").read_text()
        assert 'domain: "travel"' in created

        again = runner.invoke(main, ["experts", "create", "travel", "-d", "travel", "-o", str(output)])
        assert again.exit_code == 1
