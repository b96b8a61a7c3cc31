"""Requirement description extractor.

Mines the API name, HTTP method, route, summary, declared parameters,
result columns and table usage out of markdown-like prose. Every field
has a deterministic default, so extraction never fails.
"""

import re

from api_spec_compiler.config import CompilerConfig
from api_spec_compiler.extractor.rules import (
    FieldRule,
    find_section,
    first_match,
    iter_table_rows,
    labelled,
)
from api_spec_compiler.models import ApiColumn, ApiParameter, ApiTableUsage, DescriptionFields

NAME_RULES = (
    FieldRule("name label", labelled("接口名称|API名称|API Name")),
    FieldRule("generic name label", labelled("名称|Name")),
    FieldRule("first heading", re.compile(r"^##?\s+(.+?)$", re.MULTILINE)),
)

METHOD_RULES = (
    FieldRule(
        "method label",
        labelled("请求方法|HTTP方法|HTTP Method|方法|Method", r"`?([A-Z]+)`?", re.IGNORECASE),
        lambda v: v.strip().upper(),
    ),
)

ROUTE_RULES = (
    FieldRule("route label, inline code", labelled("接口路径|路径|URL|Path|Route", r"`([^`]+)`")),
    FieldRule("route label, bare path", labelled("接口路径|路径|URL|Path|Route", r"(/[^\s`，。]*)")),
)

DESCRIPTION_RULES = (
    FieldRule("overview section", re.compile(r"##\s*概述\s*\n\n(.+?)(?:\n\n|---)", re.DOTALL)),
    FieldRule("description label", labelled("接口描述|功能描述|Description")),
)

PARAMETER_SECTIONS = (
    re.compile(r"###\s*Query Parameters[\s\S]*?\n\n([\s\S]*?)(?:\n##|\Z)", re.IGNORECASE),
    re.compile(r"##\s*请求参数[\s\S]*?\n\n([\s\S]*?)(?:\n##|\Z)"),
    re.compile(r"###\s*请求参数[\s\S]*?\n\n([\s\S]*?)(?:\n##|\Z)"),
)

LIST_ELEMENT_SECTION = re.compile(r"####?\s*list\s*数组元素[\s\S]*?\n\n([\s\S]*?)(?:\n\n##|\Z)", re.IGNORECASE)
FIELD_SECTION = re.compile(r"###?\s*(?:数据字段说明|响应字段|返回字段)[\s\S]*?\n\n([\s\S]*?)(?:\n\n###|\Z)")

TABLE_NAME_ANNOTATION = re.compile(r"\*\*表名\*\*[：:\s]+`([^`]+)`")
FROM_CLAUSE = re.compile(r"\bFROM\s+([A-Za-z_]\w*)\.([A-Za-z_]\w*)", re.IGNORECASE | re.ASCII)
TABLE_MENTION = re.compile(r"(?:表|\btable)[：:\s]+`?([A-Za-z0-9_]+)`?", re.IGNORECASE)


def extract(text: str, config: CompilerConfig | None = None) -> DescriptionFields:
    """Extract structured API fields from a requirement description."""
    config = config or CompilerConfig()
    text = text.replace("\r\n", "\n")

    preview = text[: config.description_preview_length].replace("\n", " ")

    return DescriptionFields(
        name=first_match(NAME_RULES, text, config.default_name),
        http_method=first_match(METHOD_RULES, text, config.default_http_method),
        route_path=first_match(ROUTE_RULES, text, config.default_route_path),
        description=first_match(DESCRIPTION_RULES, text, preview),
        parameters=extract_parameters(text, config),
        columns=extract_columns(text, config),
        table_usages=extract_table_usages(text, config),
    )


def _parse_type(raw: str, config: CompilerConfig) -> tuple[str, bool]:
    """Return (platform type, is_array) for a declared type such as `string[]`."""
    raw = raw.strip()
    if raw.endswith("[]"):
        return config.map_type(raw[:-2]), True
    return config.map_type(raw), False


def extract_parameters(text: str, config: CompilerConfig) -> list[ApiParameter]:
    """Parse the declared parameter table, if the description has one."""
    block = find_section(PARAMETER_SECTIONS, text)
    if block is None:
        return []

    parameters = []
    for cells in iter_table_rows(block, min_cells=4):
        param_type, is_array = _parse_type(cells[1], config)
        parameters.append(
            ApiParameter(
                name=cells[0].strip("`"),
                param_type=param_type,
                is_array=is_array,
                required=cells[2] == "是" or cells[2].lower() == "true",
                description=cells[3],
                location="query",
            )
        )
    return parameters


def _parse_columns(block: str, config: CompilerConfig) -> list[ApiColumn]:
    columns = []
    for cells in iter_table_rows(block, min_cells=3):
        column_type, is_array = _parse_type(cells[1], config)
        columns.append(
            ApiColumn(
                name=cells[0].strip("`"),
                column_type=column_type,
                is_array=is_array,
                description=cells[2],
            )
        )
    return columns


def extract_columns(text: str, config: CompilerConfig) -> list[ApiColumn]:
    """Parse result columns.

    The `list 数组元素` table describes the per-row business fields and is
    preferred; the generic field description table is the fallback.
    """
    match = LIST_ELEMENT_SECTION.search(text)
    if match:
        columns = _parse_columns(match.group(1), config)
        if columns:
            return columns

    match = FIELD_SECTION.search(text)
    if match:
        return _parse_columns(match.group(1), config)
    return []


def extract_table_usages(text: str, config: CompilerConfig) -> list[ApiTableUsage]:
    """Find the tables the API reads from.

    Tiers are tried in order and the first one that finds anything wins:
    an explicit `**表名**` annotation, a `FROM schema.table` clause, then
    loose `表:` / `table:` mentions under the default schema.
    """
    match = TABLE_NAME_ANNOTATION.search(text)
    if match:
        parts = match.group(1).strip().split(".")
        if len(parts) == 2:
            return [ApiTableUsage(table_schema=parts[0], table_name=parts[1])]
        if len(parts) == 1 and parts[0]:
            return [ApiTableUsage(table_schema=config.default_schema, table_name=parts[0])]

    match = FROM_CLAUSE.search(text)
    if match:
        return [ApiTableUsage(table_schema=match.group(1), table_name=match.group(2))]

    usages = []
    seen = set()
    for match in TABLE_MENTION.finditer(text):
        table_name = match.group(1)
        if table_name in seen:
            continue
        seen.add(table_name)
        usages.append(ApiTableUsage(table_schema=config.default_schema, table_name=table_name))
    return usages
