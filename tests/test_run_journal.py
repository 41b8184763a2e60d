"""Tests for the command-line journal runner."""

import json

import pytest

from spot_journal.run_journal import main

EXECUTIONS = [
    {"symbol": "BTCUSDT", "side": "Buy", "execQty": "1", "execPrice": "100", "execFee": "0.1", "execTime": "0"},
    {"symbol": "BTCUSDT", "side": "Sell", "execQty": "1", "execPrice": "110", "execFee": "0.11", "execTime": "1000"},
]


@pytest.fixture
def executions_file(tmp_path):
    path = tmp_path / "executions.json"
    path.write_text(json.dumps(EXECUTIONS))
    return path


class TestRunJournal:
    def test_writes_json_output(self, executions_file, tmp_path):
        """JSON output holds trades and summary."""
        output = tmp_path / "trades.json"

        assert main(["--input", str(executions_file), "--output", str(output)]) == 0

        result = json.loads(output.read_text())
        assert result["trades"][0]["token"] == "BTC"
        assert result["trades"][0]["id"] == "BTC-1000"
        assert result["summary"]["totalPnl"] == pytest.approx(9.79)

    def test_accepts_wrapped_executions(self, tmp_path, capsys):
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"executions": EXECUTIONS}))

        assert main(["--input", str(path)]) == 0

        result = json.loads(capsys.readouterr().out)
        assert len(result["trades"]) == 1

    def test_prints_table(self, executions_file, capsys):
        assert main(["--input", str(executions_file), "--table"]) == 0

        out = capsys.readouterr().out
        assert out.splitlines()[0].startswith("Token")
        assert "BTC" in out
        assert "+10.00%" in out
        assert "Total PnL: +9.79" in out

    def test_table_without_trades(self, tmp_path, capsys):
        path = tmp_path / "empty.json"
        path.write_text("[]")

        assert main(["--input", str(path), "--table"]) == 0
        assert "No closed trades" in capsys.readouterr().out

    def test_invalid_execution_fails(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps([dict(EXECUTIONS[0], execQty="x")]))

        assert main(["--input", str(path)]) == 1

    def test_out_of_range_timestamp_fails(self, tmp_path):
        path = tmp_path / "far_future.json"
        path.write_text(json.dumps([EXECUTIONS[0], dict(EXECUTIONS[1], execTime="300000000000000")]))

        assert main(["--input", str(path)]) == 1

    def test_does_not_build_http_service(self):
        """The CLI renders through shared schemas without importing the FastAPI app."""
        import spot_journal.run_journal as run_journal

        assert not hasattr(run_journal, "app")
        assert run_journal.TradeOut.__module__ == "spot_journal.schemas"

    def test_missing_input_file_fails(self, tmp_path):
        assert main(["--input", str(tmp_path / "missing.json")]) == 1

    def test_requires_credentials_without_input(self, monkeypatch):
        monkeypatch.delenv("BYBIT_API_KEY", raising=False)
        monkeypatch.delenv("BYBIT_API_SECRET", raising=False)

        assert main([]) == 1
