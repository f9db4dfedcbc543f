from __future__ import annotations

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from confprops.cli.__main__ import app

runner = CliRunner()


def _properties(tmp_path: Path) -> Path:
    (tmp_path / "app.properties").write_text("db.port=5432\nhosts=a;b;\nroute.0=x;y\n")
    return tmp_path


def test_get_typed_value(tmp_path: Path):
    _properties(tmp_path)
    result = runner.invoke(
        app, ["get", "db.port", "--source", "app.properties", "--path", str(tmp_path), "--type", "integer"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"source": "app.properties", "key": "db.port", "value": 5432}


def test_get_list_keeps_trailing_empty(tmp_path: Path):
    _properties(tmp_path)
    result = runner.invoke(
        app, ["get", "hosts", "-s", "app.properties", "-p", str(tmp_path), "--type", "string-list"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["value"] == ["a", "b", ""]


def test_get_default(tmp_path: Path):
    _properties(tmp_path)
    result = runner.invoke(
        app, ["get", "missing", "-s", "app.properties", "-p", str(tmp_path), "--default", "fallback"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["value"] == "fallback"


def test_get_env(monkeypatch):
    monkeypatch.setenv("CONFPROPS_CLI_FLAG", "true")
    result = runner.invoke(app, ["get", "CONFPROPS_CLI_FLAG", "--kind", "env", "--type", "boolean"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"source": "property/env", "key": "CONFPROPS_CLI_FLAG", "value": True}


def test_get_missing_source(tmp_path: Path):
    result = runner.invoke(app, ["get", "k", "-s", "absent.properties", "-p", str(tmp_path)])
    assert result.exit_code == 1


def test_get_decode_error(tmp_path: Path):
    _properties(tmp_path)
    result = runner.invoke(app, ["get", "hosts", "-s", "app.properties", "-p", str(tmp_path), "--type", "integer"])
    assert result.exit_code == 1


def test_get_requires_file_source():
    result = runner.invoke(app, ["get", "k"])
    assert result.exit_code == 2


def test_get_unknown_kind():
    result = runner.invoke(app, ["get", "k", "--kind", "registry"])
    assert result.exit_code == 2


def test_dump(tmp_path: Path):
    _properties(tmp_path)
    result = runner.invoke(app, ["dump", "app.properties", "-p", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"db.port": "5432", "hosts": "a;b;", "route.0": "x;y"}


def test_declarations(tmp_path: Path):
    _properties(tmp_path)
    config_file = tmp_path / "confprops.yaml"
    config_file.write_text(
        yaml.dump(
            {
                "settings": {"search_path": ["."]},
                "declarations": {
                    "port": {"source": "app.properties", "key": "db.port", "type": "integer"},
                    "routes": {"source": "app.properties", "key": "route", "type": "string-map-list"},
                    "timeout": {"source": "app.properties", "type": "integer", "default": 30},
                },
            }
        )
    )
    result = runner.invoke(app, ["declarations", "--config", str(config_file)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {"port": 5432, "routes": {"route.0": ["x", "y"]}, "timeout": 30}


def test_declarations_without_config(tmp_path: Path):
    result = runner.invoke(app, ["declarations", "--config", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1
