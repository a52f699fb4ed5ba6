from fastapi import APIRouter, HTTPException, Query

from preload_mock.config import DEFAULT_MOUNT_NAME
from preload_mock.models import ScaffoldReport
from preload_mock.services.project import ProjectConfigError, ProjectFileNotFoundError, load_plugin_manifest
from preload_mock.services.scaffold import scaffold_mocks

router = APIRouter(prefix="/api/mocks", tags=["mocks"])


@router.post("/scaffold", response_model=ScaffoldReport)
async def scaffold(
    config: str = Query(..., description="Path to plugin.json, or the folder containing it"),
    mount_name: str = Query(DEFAULT_MOUNT_NAME, alias="mountName"),
):
    """
    Regenerate the mock files next to the manifest's preload entry.

    An existing user mock is never overwritten.
    """
    try:
        manifest = load_plugin_manifest(config)
    except ProjectFileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ProjectConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return scaffold_mocks(manifest.preload, mount_name)
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to write mock files: {str(e)}")
