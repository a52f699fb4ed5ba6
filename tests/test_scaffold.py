import logging
from pathlib import Path

from preload_mock.services.scaffold import build_preload_bundle, scaffold_mocks

PRELOAD = """
export const hello = (name: string): string => `hi ${name}`;
export const SCRIPTS = ['a', 'b'];
export default {
  toast(message: string): void {},
};
"""


def _preload(tmp_path: Path, code: str = PRELOAD) -> Path:
    path = tmp_path / "preload.ts"
    path.write_text(code, encoding="utf-8")
    return path


def test_scaffold_writes_all_files(tmp_path: Path) -> None:
    preload = _preload(tmp_path)

    report = scaffold_mocks(str(preload), "utools")

    auto = (tmp_path / "_mock.auto.ts").read_text(encoding="utf-8")
    declaration = (tmp_path / "_preload.d.ts").read_text(encoding="utf-8")
    user = (tmp_path / "preload.mock.ts").read_text(encoding="utf-8")

    assert "hello(name) {" in auto
    assert "SCRIPTS: ['a', 'b']" in auto
    assert "\twindow: {" in auto
    assert "utools: {" in auto
    assert "interface Window extends PreloadDefaultType" in declaration
    assert "export default autoMock;" in user
    assert len(report.written) == 3
    assert report.skipped == []
    assert report.errors == []
    assert report.preload_path == str(preload.resolve())


def test_scaffold_never_overwrites_user_mock(tmp_path: Path) -> None:
    preload = _preload(tmp_path)
    user = tmp_path / "preload.mock.ts"
    user.write_text("// mine\n", encoding="utf-8")

    first = scaffold_mocks(str(preload))
    second = scaffold_mocks(str(preload))

    assert user.read_text(encoding="utf-8") == "// mine\n"
    assert first.skipped == [str(user.resolve())]
    assert second.skipped == [str(user.resolve())]
    assert str(user.resolve()) not in second.written


def test_scaffold_regenerates_auto_mock(tmp_path: Path) -> None:
    preload = _preload(tmp_path, "export const a = 1;")
    scaffold_mocks(str(preload))

    preload.write_text("export const b = 2;", encoding="utf-8")
    scaffold_mocks(str(preload))

    auto = (tmp_path / "_mock.auto.ts").read_text(encoding="utf-8")
    assert "b: 2" in auto
    assert "a: 1" not in auto


def test_scaffold_reports_diagnostics(tmp_path: Path, caplog) -> None:
    preload = _preload(tmp_path, "export default () => 1;\nexport const ok = true;\n")

    with caplog.at_level(logging.WARNING):
        report = scaffold_mocks(str(preload))

    assert len(report.errors) == 1
    assert "Anonymous default export" in caplog.text
    assert "ok: true" in (tmp_path / "_mock.auto.ts").read_text(encoding="utf-8")


def test_build_preload_bundle(tmp_path: Path) -> None:
    preload = _preload(tmp_path)
    compiled = tmp_path / "dist" / "preload.cjs"
    compiled.parent.mkdir()
    compiled.write_text(
        '"use strict";\n'
        'Object.defineProperty(exports, "__esModule", { value: true });\n'
        "exports.SCRIPTS = exports.hello = void 0;\n"
        "const hello = (name) => `hi ${name}`;\n"
        "exports.hello = hello;\n"
        "exports.SCRIPTS = ['a', 'b'];\n"
        "exports.default = { toast(message) {} };\n",
        encoding="utf-8",
    )
    out = tmp_path / "dist" / "preload.js"

    report = build_preload_bundle(str(compiled), str(out), str(preload), "utools")

    bundle = out.read_text(encoding="utf-8")
    assert bundle.startswith('"use strict";\nwindow.utools = Object.create(null);\n')
    assert "exports" not in bundle
    assert "const SCRIPTS = ['a', 'b'];" in bundle
    assert "Object.assign(window, { toast(message) {} });" in bundle
    assert bundle.endswith("window.utools = { hello, SCRIPTS };\n")

    declaration = (tmp_path / "_preload.d.ts").read_text(encoding="utf-8")
    assert "interface Window extends PreloadDefaultType" in declaration
    assert report.written == [str(out), str(tmp_path.resolve() / "_preload.d.ts")]
