import json
import logging
from pathlib import Path
from typing import Tuple

from pydantic import ValidationError

from preload_mock.config import AUTO_MOCK_FILE_NAME, DECLARATION_FILE_TEMPLATE, USER_MOCK_SUFFIX
from preload_mock.models import PluginManifest

logger = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "plugin.json"


class ProjectConfigError(Exception):
    """The plugin manifest is missing, malformed, or points at files that don't exist."""


class ProjectFileNotFoundError(ProjectConfigError):
    """The manifest, or a file it references, is absent."""


def preload_id(preload_path) -> str:
    """
    Base name of the preload entry without its final extension.

    `src/preload.ts` -> `preload`; `preload.d.ts` -> `preload.d`.
    """
    return Path(preload_path).stem


def load_plugin_manifest(config_path) -> PluginManifest:
    """
    Read and validate a `plugin.json`.

    `preload` and `logo` are rewritten to absolute paths resolved against the
    manifest's own directory, and both must exist on disk.
    """
    path = Path(config_path)
    if path.is_dir():
        path = path / MANIFEST_FILE_NAME
    if not path.is_file():
        raise ProjectFileNotFoundError(f"Plugin manifest not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProjectConfigError(f"Could not read plugin manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ProjectConfigError(f"Plugin manifest {path} must contain a JSON object")

    try:
        manifest = PluginManifest.model_validate(data)
    except ValidationError as e:
        raise ProjectConfigError(f"Invalid plugin manifest {path}: {e}") from e

    base_dir = path.parent.resolve()
    preload_path = (base_dir / manifest.preload).resolve()
    if not preload_path.is_file():
        raise ProjectFileNotFoundError(f"Preload file not found: {preload_path}")

    updates = {"preload": str(preload_path)}
    if manifest.logo:
        logo_path = (base_dir / manifest.logo).resolve()
        if not logo_path.is_file():
            raise ProjectFileNotFoundError(f"Logo file not found: {logo_path}")
        updates["logo"] = str(logo_path)

    logger.debug("Loaded plugin manifest %s (preload: %s)", path, preload_path)
    return manifest.model_copy(update=updates)


def generated_file_paths(preload_path) -> Tuple[Path, Path, Path]:
    """(auto mock, declaration, user mock) paths beside the preload entry."""
    preload = Path(preload_path)
    pid = preload_id(preload)
    folder = preload.parent
    return (
        folder / AUTO_MOCK_FILE_NAME,
        folder / DECLARATION_FILE_TEMPLATE.format(preload_id=pid),
        folder / f"{pid}{USER_MOCK_SUFFIX}",
    )
