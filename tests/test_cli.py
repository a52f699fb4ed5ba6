import json
from pathlib import Path

import pytest

from preload_mock import run


def _plugin(tmp_path: Path) -> Path:
    (tmp_path / "preload.ts").write_text("export const hello = (name) => name;\n", encoding="utf-8")
    config = tmp_path / "plugin.json"
    config.write_text(json.dumps({"preload": "preload.ts"}), encoding="utf-8")
    return config


def test_analyze_prints_json(tmp_path: Path, capsys) -> None:
    source = tmp_path / "preload.ts"
    source.write_text("export const a = 'x';\n", encoding="utf-8")

    run.main(["analyze", str(source)])

    data = json.loads(capsys.readouterr().out)
    assert data["namedExports"] == {"a": {"type": "Constant", "value": "'x'"}}


def test_analyze_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="File does not exist"):
        run.main(["analyze", str(tmp_path / "nope.ts")])


def test_scaffold_command(tmp_path: Path, capsys) -> None:
    config = _plugin(tmp_path)

    run.main(["scaffold", "--config", str(config), "--mount-name", "utools"])

    out = capsys.readouterr().out
    assert "Wrote" in out
    assert (tmp_path / "_mock.auto.ts").exists()
    assert (tmp_path / "preload.mock.ts").exists()

    run.main(["scaffold", "--config", str(config)])
    assert "Kept existing" in capsys.readouterr().out


def test_scaffold_bad_config(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="Plugin manifest not found"):
        run.main(["scaffold", "--config", str(tmp_path / "plugin.json")])


def test_bundle_command(tmp_path: Path) -> None:
    config = _plugin(tmp_path)
    compiled = tmp_path / "compiled.js"
    compiled.write_text(
        '"use strict";\nconst hello = (name) => name;\nexports.hello = hello;\n',
        encoding="utf-8",
    )
    out = tmp_path / "dist" / "preload.js"

    run.main(["bundle", "--config", str(config), "--compiled", str(compiled), "--out", str(out)])

    assert out.read_text(encoding="utf-8") == (
        '"use strict";\n'
        "window.preload = Object.create(null);\n"
        "const hello = (name) => name;\n"
        "window.preload = { hello };\n"
    )


def test_serve_runs_uvicorn(monkeypatch) -> None:
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr(run.uvicorn, "run", fake_run)

    run.main(["serve", "--port", "9123"])

    assert calls["app"] == "preload_mock.main:app"
    assert calls["port"] == 9123
    assert calls["host"] == "127.0.0.1"
