"""
Tests for the streetbuilder command-line interface.
"""
import json
import sys

import pytest

from streetbuilder import __version__
from streetbuilder.__main__ import main


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["streetbuilder", *args])
    return main()


def test_show(monkeypatch, capsys):
    assert run_cli(monkeypatch, "show", "--size", "8", "--seed", "1") == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 8
    assert sum(line.count("@") for line in lines) == 1


def test_info(monkeypatch, capsys):
    assert run_cli(monkeypatch, "info") == 0
    out = capsys.readouterr().out
    assert f"streetbuilder v{__version__}" in out
    assert "known_types" in out
    assert "stream_address" not in out


def test_run(monkeypatch, capsys):
    assert run_cli(monkeypatch, "run", "--size", "10", "--max-ticks", "20", "--no-dance") == 0
    assert "=== Mission Results ===" in capsys.readouterr().out


def test_run_with_config_file(monkeypatch, capsys, tmp_path):
    path = tmp_path / "mission.json"
    path.write_text(json.dumps({"world_size": 10, "max_ticks": 15}))
    assert run_cli(monkeypatch, "run", "-c", str(path), "--variant", "compact") == 0
    assert "10x10" in capsys.readouterr().out


@pytest.mark.parametrize(
    "args",
    [
        ("run", "--size", "2"),
        ("run", "--config", "does-not-exist.yaml"),
        ("show", "--size", "1"),
    ],
)
def test_bad_configuration(monkeypatch, capsys, args):
    assert run_cli(monkeypatch, *args) == 1
    assert capsys.readouterr().out.startswith("Error:")


def test_no_command(monkeypatch):
    assert run_cli(monkeypatch) == 1
