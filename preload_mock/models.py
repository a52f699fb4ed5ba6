from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from preload_mock.config import DEFAULT_MOUNT_NAME

_ENTITY_CONFIG = {
    "populate_by_name": True,
    "frozen": True,
}


class FunctionEntity(BaseModel):
    type: Literal["Function"] = "Function"
    # Parameter names as written; types are dropped.
    params: List[str] = Field(default_factory=list)
    mock_return_value: str = Field(alias="mockReturnValue")

    model_config = _ENTITY_CONFIG


class ConstantEntity(BaseModel):
    type: Literal["Constant"] = "Constant"
    # Canonical source text of the value, e.g. "'hi'" or "[1, 2]".
    value: str

    model_config = _ENTITY_CONFIG


class ObjectEntity(BaseModel):
    type: Literal["Object"] = "Object"
    props: Dict[str, "ExportEntity"] = Field(default_factory=dict)

    model_config = _ENTITY_CONFIG


ExportEntity = Annotated[
    Union[FunctionEntity, ConstantEntity, ObjectEntity],
    Field(discriminator="type"),
]

ObjectEntity.model_rebuild()


class AnalysisResult(BaseModel):
    named_exports: Dict[str, ExportEntity] = Field(default_factory=dict, alias="namedExports")
    # Only present when the module has `export default {...}`, `export default ident`
    # or a named default function.
    default_export: Optional[Dict[str, ExportEntity]] = Field(default=None, alias="defaultExport")
    errors: List[str] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True
    }


class PurifyResult(BaseModel):
    code: str
    has_default_export: bool = Field(default=False, alias="hasDefaultExport")

    model_config = {
        "populate_by_name": True
    }


class GeneratedMocks(BaseModel):
    auto_mock: str = Field(alias="autoMock")
    user_mock: str = Field(alias="userMock")
    declaration: str

    model_config = {
        "populate_by_name": True
    }


class ScaffoldReport(BaseModel):
    preload_path: str = Field(alias="preloadPath")
    written: List[str] = Field(default_factory=list)
    # Files left alone because they already existed (the user mock seed).
    skipped: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    model_config = {
        "populate_by_name": True
    }


class PluginManifest(BaseModel):
    """
    The subset of a uTools-style `plugin.json` this tool reads.

    Unknown keys are kept so the manifest can be written back out untouched.
    """

    preload: str
    logo: Optional[str] = None
    name: Optional[str] = None
    plugin_name: Optional[str] = Field(default=None, alias="pluginName")
    main: Optional[str] = None
    version: Optional[str] = None

    model_config = {
        "populate_by_name": True,
        "extra": "allow",
    }


class ExportsRequest(BaseModel):
    source: str
    file_path: str = Field(default="preload.ts", alias="filePath")

    model_config = {
        "populate_by_name": True
    }


class PurifyRequest(BaseModel):
    code: str


class MocksRequest(ExportsRequest):
    mount_name: str = Field(default=DEFAULT_MOUNT_NAME, alias="mountName")
    preload_id: str = Field(default="preload", alias="preloadId")
