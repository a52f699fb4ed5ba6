import json
from pathlib import Path

from fastapi.testclient import TestClient

from preload_mock.main import app


def _client() -> TestClient:
    return TestClient(app)


def test_api_status() -> None:
    resp = _client().get("/api-status")
    assert resp.status_code == 200
    assert "running" in resp.json()["message"]


def test_analyze_exports() -> None:
    resp = _client().post("/api/analysis/exports", json={
        "source": "export function greet(name: string): string { return name; }\nexport default { ready: true };",
        "filePath": "preload.ts",
    })

    assert resp.status_code == 200
    data = resp.json()
    assert data["namedExports"]["greet"] == {
        "type": "Function",
        "params": ["name"],
        "mockReturnValue": "''",
    }
    assert data["defaultExport"] == {"ready": {"type": "Constant", "value": "true"}}
    assert data["errors"] == []


def test_analyze_exports_file_path_defaults() -> None:
    resp = _client().post("/api/analysis/exports", json={"source": "export const a = 1;"})
    assert resp.status_code == 200
    assert resp.json()["defaultExport"] is None


def test_analyze_exports_requires_source() -> None:
    resp = _client().post("/api/analysis/exports", json={"filePath": "preload.ts"})
    assert resp.status_code == 422


def test_purify() -> None:
    resp = _client().post("/api/analysis/purify", json={"code": "exports.default = api;\n"})
    assert resp.status_code == 200
    assert resp.json() == {"code": "Object.assign(window, api);\n", "hasDefaultExport": True}


def test_mocks() -> None:
    resp = _client().post("/api/analysis/mocks", json={
        "source": "export const a = 1;",
        "filePath": "main.ts",
        "mountName": "utools",
        "preloadId": "main",
    })

    assert resp.status_code == 200
    data = resp.json()
    assert "utools: {" in data["autoMock"]
    assert "from './_main.d'" in data["autoMock"]
    assert "export default autoMock;" in data["userMock"]
    assert "utools: PreloadNamedExportsType;" in data["declaration"]


def test_scaffold_endpoint(tmp_path: Path) -> None:
    (tmp_path / "preload.ts").write_text("export const a = 1;", encoding="utf-8")
    config = tmp_path / "plugin.json"
    config.write_text(json.dumps({"preload": "preload.ts"}), encoding="utf-8")

    resp = _client().post("/api/mocks/scaffold", params={"config": str(config), "mountName": "utools"})

    assert resp.status_code == 200
    data = resp.json()
    assert len(data["written"]) == 3
    assert data["preloadPath"] == str((tmp_path / "preload.ts").resolve())
    assert "utools: {" in (tmp_path / "_mock.auto.ts").read_text(encoding="utf-8")


def test_scaffold_endpoint_missing_manifest(tmp_path: Path) -> None:
    resp = _client().post("/api/mocks/scaffold", params={"config": str(tmp_path / "plugin.json")})
    assert resp.status_code == 404
    assert "Plugin manifest not found" in resp.json()["detail"]


def test_scaffold_endpoint_invalid_manifest(tmp_path: Path) -> None:
    config = tmp_path / "plugin.json"
    config.write_text("{}", encoding="utf-8")

    resp = _client().post("/api/mocks/scaffold", params={"config": str(config)})
    assert resp.status_code == 400
    assert "Invalid plugin manifest" in resp.json()["detail"]
