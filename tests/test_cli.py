"""Tests for the gridtank command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from gridtank import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("GRIDTANK_LOG_LEVEL", raising=False)


def write_snapshot(tmp_path: Path, me: dict, **extra: dict) -> Path:
    state = {"me": me, **extra}
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps({"_links": {"self": {"href": "me"}}, "arena": {"dims": [3, 3], "state": state}}))
    return path


def test_decide_prints_action(tmp_path: Path) -> None:
    path = write_snapshot(tmp_path, {"x": 1, "y": 1, "direction": "N"})
    result = runner.invoke(cli.app, ["decide", str(path)])
    assert result.exit_code == 0
    assert "F" in result.output
    assert "advance" in result.output


def test_decide_reports_threat(tmp_path: Path) -> None:
    path = write_snapshot(tmp_path, {"x": 1, "y": 1, "direction": "E"}, foe={"x": 1, "y": 0, "direction": "S"})
    result = runner.invoke(cli.app, ["decide", str(path)])
    assert result.exit_code == 0
    assert "evade" in result.output
    assert "threat=(1, 0)" in result.output


def test_decide_rejects_bad_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"arena": {}}')
    result = runner.invoke(cli.app, ["decide", str(path)])
    assert result.exit_code == 1
    assert "Invalid ArenaUpdate" in result.output


def test_decide_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["decide", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_decide_uses_config(tmp_path: Path) -> None:
    cfg = tmp_path / "bot.yaml"
    cfg.write_text("policy:\n  rotate: R\n")
    path = write_snapshot(tmp_path, {"x": 0, "y": 1, "direction": "W"})
    result = runner.invoke(cli.app, ["decide", str(path), "--config", str(cfg)])
    assert result.exit_code == 0
    assert "R" in result.output
    assert "boundary" in result.output


def test_bad_config_exits(tmp_path: Path) -> None:
    cfg = tmp_path / "bot.yaml"
    cfg.write_text("policy:\n  rotate: T\n")
    path = write_snapshot(tmp_path, {"x": 1, "y": 1, "direction": "N"})
    result = runner.invoke(cli.app, ["decide", str(path), "--config", str(cfg)])
    assert result.exit_code == 1
    assert "Invalid config" in result.output


def test_simulate_prints_standings() -> None:
    result = runner.invoke(cli.app, ["simulate", "--opponent", "rammer", "--opponent", "spinner", "--turns", "20", "--seed", "3"])
    assert result.exit_code == 0
    assert "20 turns on 8x6" in result.output
    assert "self" in result.output
    assert "rammer-0" in result.output


def test_simulate_rejects_unknown_opponent() -> None:
    result = runner.invoke(cli.app, ["simulate", "--opponent", "teleporter"])
    assert result.exit_code == 1
    assert "Cannot run match" in result.output


def test_simulate_rejects_bad_size() -> None:
    result = runner.invoke(cli.app, ["simulate", "--size", "eight"])
    assert result.exit_code != 0


def test_serve_runs_uvicorn_with_configured_port(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = {}

    def fake_run(app, host: str, port: int, log_level: str) -> None:
        calls.update(app=app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr("uvicorn.run", fake_run)
    monkeypatch.setenv("PORT", "9123")
    result = runner.invoke(cli.app, ["serve"])
    assert result.exit_code == 0
    assert calls["port"] == 9123
    assert calls["host"] == "0.0.0.0"
    assert calls["log_level"] == "info"


@pytest.mark.parametrize("command", [["decide", "SNAPSHOT"], ["simulate", "--turns", "1"], ["serve"]])
def test_unparseable_config_exits_cleanly(tmp_path: Path, command: list) -> None:
    cfg = tmp_path / "bot.yaml"
    cfg.write_text("port: [1\n")
    path = write_snapshot(tmp_path, {"x": 1, "y": 1, "direction": "N"})
    args = [str(path) if arg == "SNAPSHOT" else arg for arg in command]
    result = runner.invoke(cli.app, [*args, "--config", str(cfg)])
    assert result.exit_code == 1
    assert "Invalid config" in result.output
