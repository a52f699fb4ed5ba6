import logging
from pathlib import Path
from typing import Optional

from preload_mock.config import DEFAULT_MOUNT_NAME
from preload_mock.models import AnalysisResult, ScaffoldReport
from preload_mock.services.codegen import generate_mocks, generate_preload_tsd
from preload_mock.services.export_analysis import ExportAnalyzer, get_export_analyzer
from preload_mock.services.project import generated_file_paths, preload_id
from preload_mock.services.purify import assemble_preload_bundle, purify_bundle

logger = logging.getLogger(__name__)


def _analyze_preload(preload: Path, analyzer: Optional[ExportAnalyzer], report: ScaffoldReport) -> AnalysisResult:
    analyzer = analyzer or get_export_analyzer()
    result = analyzer.analyze_file(str(preload))
    for error in result.errors:
        logger.warning("%s", error)
    report.errors.extend(result.errors)
    return result


def _write(path: Path, content: str, report: ScaffoldReport) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    report.written.append(str(path))
    logger.info("Wrote %s", path)


def scaffold_mocks(
    preload_path,
    mount_name: str = DEFAULT_MOUNT_NAME,
    analyzer: Optional[ExportAnalyzer] = None,
) -> ScaffoldReport:
    """
    Generate the mock files that sit beside a preload entry.

    `_mock.auto.ts` and `_<id>.d.ts` are rewritten on every call. The
    hand-edited `<id>.mock.ts` is only created when it doesn't exist yet.
    Analysis diagnostics are logged and returned; they never stop the write.
    """
    preload = Path(preload_path).resolve()
    report = ScaffoldReport(preload_path=str(preload))

    result = _analyze_preload(preload, analyzer, report)
    mocks = generate_mocks(result, mount_name, preload_id(preload))

    auto_path, declaration_path, user_path = generated_file_paths(preload)
    _write(auto_path, mocks.auto_mock, report)
    _write(declaration_path, mocks.declaration, report)

    if user_path.exists():
        report.skipped.append(str(user_path))
        logger.debug("Keeping existing user mock %s", user_path)
    else:
        _write(user_path, mocks.user_mock, report)

    return report


def build_preload_bundle(
    compiled_path,
    out_path,
    preload_path,
    mount_name: str = DEFAULT_MOUNT_NAME,
    analyzer: Optional[ExportAnalyzer] = None,
) -> ScaffoldReport:
    """
    Produce the browser-loadable preload script from a compiled CommonJS bundle.

    The bundle is purified, mounted on `window.<mount_name>` using the named
    exports of the preload source, and written to `out_path`. The ambient
    declaration file beside the preload entry is refreshed as well.
    """
    preload = Path(preload_path).resolve()
    report = ScaffoldReport(preload_path=str(preload))

    compiled = Path(compiled_path).read_text(encoding="utf-8")
    purified = purify_bundle(compiled)

    result = _analyze_preload(preload, analyzer, report)
    bundle = assemble_preload_bundle(purified.code, mount_name, result.named_exports.keys())
    _write(Path(out_path), bundle, report)

    _, declaration_path, _ = generated_file_paths(preload)
    declaration = generate_preload_tsd(mount_name, preload_id(preload), purified.has_default_export)
    _write(declaration_path, declaration, report)

    return report
