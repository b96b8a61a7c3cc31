"""Sample SQL resolution.

A sample statement with literal values is needed before parameterization.
A fenced ```sql block in the description is used verbatim; otherwise one
is synthesized from the extracted table, columns and a few Chinese
condition idioms.
"""

import re

from api_spec_compiler.config import CompilerConfig
from api_spec_compiler.models import ApiColumn, DescriptionFields

SQL_BLOCK = re.compile(r"```sql\s+([\s\S]+?)\s+```", re.IGNORECASE)

# 收费站编号为STA001
CODE_IDIOM = re.compile(r"(?:编号|code)(?:为|是|等于|=)\s*['\"]?([A-Za-z0-9_]+)['\"]?", re.IGNORECASE)
# 名称包含北京
NAME_IDIOM = re.compile(r"(?:名称|name)(?:包含|含有|like)\s*['\"]?([^'\"，。\n]+)['\"]?", re.IGNORECASE)
# 道路名称为G15 / 道路包含沈海
ROAD_IDIOM = re.compile(
    r"(?:道路|road)(?:名称|name)?(为|是|包含|=)\s*['\"]?([^'\"，。\n]+)['\"]?", re.IGNORECASE
)
# 按收费站编号升序排列
ORDER_IDIOM = re.compile(r"按\s*([^\s，。,]+?)\s*(?:升序|降序|排序|排列)")


def extract_sql_block(text: str) -> str | None:
    """Return the first fenced SQL block, trimmed, if there is one."""
    match = SQL_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return None


def camel_to_snake(name: str) -> str:
    return re.sub(r"[A-Z]", lambda m: "_" + m.group(0).lower(), name)


def build_where_clause(text: str, config: CompilerConfig) -> str:
    """Build WHERE predicates with sample values taken from the prose."""
    predicates = []

    match = CODE_IDIOM.search(text)
    if match:
        predicates.append(f"{config.code_column} = '{match.group(1)}'")

    match = NAME_IDIOM.search(text)
    if match:
        predicates.append(f"{config.name_column} LIKE '%{match.group(1).strip()}%'")

    match = ROAD_IDIOM.search(text)
    if match:
        value = match.group(2).strip()
        if match.group(1) == "包含" or "模糊" in text:
            predicates.append(f"{config.road_column} LIKE '%{value}%'")
        else:
            predicates.append(f"{config.road_column} = '{value}'")

    predicates.extend(config.mandatory_predicates)
    return " AND ".join(predicates)


def build_order_by_clause(text: str, columns: list[ApiColumn], config: CompilerConfig) -> str:
    """Build the ORDER BY body (without the keywords), or "" for none."""
    match = ORDER_IDIOM.search(text)
    if match:
        field = match.group(1)
        column = config.field_names.get(field, field)
        return f"{column} DESC" if "降序" in text else column

    if not columns:
        return ""

    for column in columns:
        lowered = column.name.lower()
        if "code" in lowered or "id" in lowered:
            return camel_to_snake(column.name)
    return camel_to_snake(columns[0].name)


def resolve(text: str, fields: DescriptionFields, config: CompilerConfig | None = None) -> str:
    """Return the sample SQL for a description, or "" when none can be built."""
    config = config or CompilerConfig()
    text = text.replace("\r\n", "\n")

    sql = extract_sql_block(text)
    if sql:
        return sql

    if not fields.table_usages:
        return ""

    if fields.columns:
        select_list = ", ".join(camel_to_snake(c.name) for c in fields.columns)
    else:
        select_list = "*"

    table = fields.table_usages[0]
    sql = f"SELECT {select_list} FROM {table.table_schema}.{table.table_name}"

    where_clause = build_where_clause(text, config)
    if where_clause:
        sql += f" WHERE {where_clause}"

    order_by = build_order_by_clause(text, fields.columns, config)
    if order_by:
        sql += f" ORDER BY {order_by}"

    return sql
