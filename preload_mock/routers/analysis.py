from fastapi import APIRouter

from preload_mock.models import (
    AnalysisResult,
    ExportsRequest,
    GeneratedMocks,
    MocksRequest,
    PurifyRequest,
    PurifyResult,
)
from preload_mock.services.codegen import generate_mocks
from preload_mock.services.export_analysis import get_export_analyzer
from preload_mock.services.purify import purify_bundle

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


@router.post("/exports", response_model=AnalysisResult)
async def analyze_exports(request: ExportsRequest):
    """
    Describe the export surface of a module.

    Relative re-exports are resolved against `filePath` on the server's disk.
    """
    return get_export_analyzer().analyze(request.source, request.file_path)


@router.post("/purify", response_model=PurifyResult)
async def purify(request: PurifyRequest):
    return purify_bundle(request.code)


@router.post("/mocks", response_model=GeneratedMocks)
async def mocks(request: MocksRequest):
    result = get_export_analyzer().analyze(request.source, request.file_path)
    return generate_mocks(result, request.mount_name, request.preload_id)
