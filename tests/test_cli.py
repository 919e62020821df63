"""Tests for the command line entry point."""

import json

from tmj_scene.__main__ import main

from conftest import map_json


def test_cli_prints_summary(tmp_path, capsys):
    path = tmp_path / "level.tmj"
    path.write_text(json.dumps(map_json()))

    assert main([str(path), "--merge", "row"]) == 0

    out = capsys.readouterr().out
    assert "[1] level (tile)" in out
    assert "[2] materials (object)" in out
    assert "Diagnostics: 1" in out


def test_cli_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.tmj")]) == 1
    assert "not found" in capsys.readouterr().out


def test_cli_structural_error(tmp_path, capsys):
    data = map_json()
    data["layers"][1]["data"] = [1]
    path = tmp_path / "broken.tmj"
    path.write_text(json.dumps(data))

    assert main([str(path)]) == 1
    assert "Layer data is incorrect" in capsys.readouterr().out
