"""Tests for the click CLI."""

import json

import pytest
from click.testing import CliRunner

from tradebook.cli import main
from tradebook.core.enums import ClosureType


@pytest.fixture
def runner():
    return CliRunner()


def _json_from(output: str):
    """Parse the JSON document printed by a command, skipping any log lines."""
    decoder = json.JSONDecoder()
    pos = 0
    for line in output.splitlines(keepends=True):
        if line.startswith(("{", "[")):
            try:
                return decoder.raw_decode(output[pos:])[0]
            except json.JSONDecodeError:
                pass
        pos += len(line)
    raise AssertionError(f"no JSON document in output:\n{output}")


class TestSizeCommand:
    def test_recommends_size(self, runner):
        result = runner.invoke(main, [
            "size", "--direction", "long", "--entry", "100", "--stop", "95",
            "--capital", "10000", "--value-per-unit", "5", "--risk-pct", "1",
        ])
        assert result.exit_code == 0, result.output
        assert _json_from(result.output)["recommended_size"] == 4.0

    def test_split_over_legs(self, runner):
        result = runner.invoke(main, [
            "size", "--direction", "short", "--entry", "50", "--stop", "55",
            "--capital", "10000", "--value-per-unit", "5", "--risk-amount", "200", "--legs", "2",
        ])
        assert result.exit_code == 0, result.output
        assert _json_from(result.output)["legs"] == [4.0, 4.0]

    def test_invalid_stop_exits_nonzero(self, runner):
        result = runner.invoke(main, [
            "size", "--direction", "long", "--entry", "100", "--stop", "105",
            "--capital", "10000", "--value-per-unit", "5",
        ])
        assert result.exit_code == 1
        assert "stop-loss must be below entry" in result.output


class TestSummaryCommand:
    def test_summary_from_files(self, runner, tmp_path, winner, loser, sample_model):
        trades_file = tmp_path / "trades.json"
        models_file = tmp_path / "models.json"
        trades_file.write_text(json.dumps([winner().to_record(), loser().to_record()]))
        models_file.write_text(json.dumps([sample_model.model_dump(mode="json")]))

        result = runner.invoke(main, [
            "summary", "--trades", str(trades_file), "--models", str(models_file),
            "--log-level", "WARNING",
        ])
        assert result.exit_code == 0, result.output
        report = _json_from(result.output)
        assert report["metrics"]["total_trades"] == 2
        assert report["metrics"]["total_pl"] == pytest.approx(250.0)

    def test_calendar(self, runner, tmp_path, make_trade, close_trade):
        trades_file = tmp_path / "trades.json"
        trade = close_trade(make_trade(), [ClosureType.TAKE_PROFIT])
        trades_file.write_text(json.dumps({"items": [trade.to_record()]}))
        result = runner.invoke(main, [
            "summary", "--trades", str(trades_file), "--calendar", "--log-level", "WARNING",
        ])
        assert result.exit_code == 0, result.output
        assert _json_from(result.output)["2024-01-01"]["trade_count"] == 1

    def test_bad_file(self, runner, tmp_path):
        bad = tmp_path / "trades.json"
        bad.write_text("not json")
        result = runner.invoke(main, ["summary", "--trades", str(bad)])
        assert result.exit_code == 1
        assert "Cannot read" in result.output


class TestIdentifyCommand:
    def test_ranks_models(self, runner, tmp_path, sample_model, second_model):
        models_file = tmp_path / "models.json"
        models_file.write_text(json.dumps([
            sample_model.model_dump(mode="json"), second_model.model_dump(mode="json"),
        ]))
        result = runner.invoke(main, [
            "identify", "--models", str(models_file),
            "--observe", "framework:FVG", "--observe", "framework:Breaker",
        ])
        assert result.exit_code == 0, result.output
        ranked = _json_from(result.output)
        assert [r["model_id"] for r in ranked] == ["model-b", "model-a"]

    def test_bad_observation(self, runner, tmp_path):
        models_file = tmp_path / "models.json"
        models_file.write_text("[]")
        result = runner.invoke(main, ["identify", "--models", str(models_file), "--observe", "FVG"])
        assert result.exit_code == 2
