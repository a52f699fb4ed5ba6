import re
from typing import Dict, Optional

from preload_mock.config import AUTO_MOCK_ID, GENERATED_BY
from preload_mock.models import (
    AnalysisResult,
    ConstantEntity,
    ExportEntity,
    FunctionEntity,
    GeneratedMocks,
    ObjectEntity,
)

_IDENTIFIER = re.compile(r'^[A-Za-z_$][\w$]*$')


def _property_name(name: str) -> str:
    if _IDENTIFIER.match(name):
        return name
    escaped = name.replace('\\', '\\\\').replace("'", "\\'")
    return f"'{escaped}'"


def render_members(entities: Optional[Dict[str, ExportEntity]], indent_level: int = 1) -> str:
    """
    Render entities as object-literal members, one tab per nesting level.

    Output follows the insertion order of `entities`, so the same input always
    gives byte-identical text.
    """
    if not entities:
        return ''

    indent = '\t' * indent_level
    members = []
    for name, entity in entities.items():
        key = _property_name(name)
        if isinstance(entity, ObjectEntity):
            body = render_members(entity.props, indent_level + 1)
            if body:
                members.append(f"{indent}{key}: {{\n{body}\n{indent}}}")
            else:
                members.append(f"{indent}{key}: {{}}")
        elif isinstance(entity, FunctionEntity):
            params = ', '.join(entity.params)
            members.append(
                f"{indent}{key}({params}) {{\n"
                f"{indent}\treturn {entity.mock_return_value};\n"
                f"{indent}}}"
            )
        elif isinstance(entity, ConstantEntity):
            members.append(f"{indent}{key}: {entity.value}")
    return ',\n'.join(members)


def generate_auto_mock(result: AnalysisResult, mount_name: str, preload_id: str) -> str:
    default_members = render_members(result.default_export, 2)
    named_members = render_members(result.named_exports, 2)

    sections = []
    if result.default_export is not None:
        window = f"{{\n{default_members}\n\t}}" if default_members else "{}"
        sections.append(
            "\t// Default export members, mounted directly on window\n"
            f"\twindow: {window}"
        )
    if named_members:
        sections.append(
            f"\t// Named exports, mounted on window.{mount_name}\n"
            f"\t{mount_name}: {{\n{named_members}\n\t}}"
        )
    body = ',\n'.join(sections)
    if body:
        body += '\n'

    return (
        "// This file is regenerated on every build. Do not edit it directly.\n"
        f"// Generated by {GENERATED_BY}\n"
        f"import type {{ ExportsTypesForMock }} from './_{preload_id}.d';\n"
        "\n"
        "export const autoMock: ExportsTypesForMock = {\n"
        f"{body}"
        "}\n"
    )


def generate_user_mock(mount_name: str) -> str:
    """Seed for the hand-edited mock; callers must never overwrite an existing copy."""
    return (
        "// Customize the mock implementation as needed.\n"
        f"import {{ autoMock }} from './{AUTO_MOCK_ID}';\n"
        "\n"
        "// Edit the autoMock object directly or override its members, e.g.\n"
        f"// autoMock.{mount_name}.someFunction = () => {{ ... }}\n"
        "\n"
        "export default autoMock;\n"
    )


def generate_preload_tsd(mount_name: str, preload_id: str, has_default_export: bool) -> str:
    lines = [
        f"// Generated by {GENERATED_BY}",
        "// Do not edit this file!",
    ]
    if has_default_export:
        lines.append(f"import type defaultExport from './{preload_id}'")
    lines.append(f"import type * as namedExports from './{preload_id}'")
    lines.append("")

    if has_default_export:
        lines.append("export type PreloadDefaultType = typeof defaultExport")
    lines.append("export type PreloadNamedExportsType = typeof namedExports")
    lines.append("")

    lines.append("export interface ExportsTypesForMock {")
    if has_default_export:
        lines.append("\twindow: PreloadDefaultType,")
    lines.append(f"\t{mount_name}: Omit<PreloadNamedExportsType, 'default'>,")
    lines.append("}")
    lines.append("")

    lines.append("declare global {")
    if has_default_export:
        lines.append("\tinterface Window extends PreloadDefaultType {")
    else:
        lines.append("\tinterface Window {")
    lines.append(f"\t\t{mount_name}: PreloadNamedExportsType;")
    lines.append("\t}")
    lines.append("}")
    return '\n'.join(lines) + '\n'


def generate_mocks(result: AnalysisResult, mount_name: str, preload_id: str) -> GeneratedMocks:
    return GeneratedMocks(
        auto_mock=generate_auto_mock(result, mount_name, preload_id),
        user_mock=generate_user_mock(mount_name),
        declaration=generate_preload_tsd(mount_name, preload_id, result.default_export is not None),
    )
