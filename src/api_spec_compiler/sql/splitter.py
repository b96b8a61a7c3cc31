"""Split parameterized SQL into main SQL, WHERE conditions and ORDER BY.

Limitations: the ORDER BY search takes the last occurrence in the whole
string and the WHERE search takes the first, neither looking at
subqueries or string literals.
"""

import re

from api_spec_compiler.models import ApiCondition, SplitResult
from api_spec_compiler.sql.tokenizer import paren_runs, tokenize_conditions

ORDER_BY = re.compile(r"\bORDER\s+BY\b", re.IGNORECASE)
WHERE = re.compile(r"\bWHERE\b", re.IGNORECASE)
PLACEHOLDER = re.compile(r"#\{(\w+)\}")


def split(sql: str) -> SplitResult:
    """Split a parameterized statement into its stored parts."""
    body, order_by = _extract_order_by(sql)
    main_sql, where_body, has_where = _extract_where(body)
    conditions = parse_conditions(where_body) if has_where else []

    return SplitResult(
        main_sql=main_sql.strip(),
        conditions=conditions,
        order_by=order_by,
        has_where=has_where,
        has_order_by=bool(order_by),
    )


def _extract_order_by(sql: str) -> tuple[str, str]:
    matches = list(ORDER_BY.finditer(sql))
    if not matches:
        return sql, ""
    start = matches[-1].start()
    return sql[:start].strip(), sql[start:].strip()


def _extract_where(sql: str) -> tuple[str, str, bool]:
    match = WHERE.search(sql)
    if not match:
        return sql, "", False
    return sql[: match.start()].strip(), sql[match.end():].strip(), True


def _make_condition(fragment: str, connector: str, order_no: int) -> ApiCondition:
    statement = fragment.strip()
    open_parens, close_parens = paren_runs(statement)
    match = PLACEHOLDER.search(statement)
    return ApiCondition(
        statement=statement,
        connector=connector,
        open_parens=open_parens,
        close_parens=close_parens,
        param_name=match.group(1) if match else "",
        order_no=order_no,
    )


def parse_conditions(where_body: str) -> list[ApiCondition]:
    """Turn a WHERE body into ordered conditions.

    Each condition carries the connector that joined it to the previous
    one; the first condition gets AND. The statement keeps the fragment
    text as written, parentheses included.
    """
    conditions = []
    connector = "AND"
    current = ""

    for token in tokenize_conditions(where_body):
        if token.kind == "connector":
            if current:
                conditions.append(_make_condition(current, connector, len(conditions)))
                current = ""
            connector = token.text
            continue
        current = f"{current} {token.text}" if current else token.text

    if current:
        conditions.append(_make_condition(current, connector, len(conditions)))
    return conditions


def rejoin(result: SplitResult) -> str:
    """Reassemble a statement from its split parts."""
    sql = result.main_sql
    if result.conditions:
        parts = []
        for i, cond in enumerate(result.conditions):
            parts.append(cond.statement if i == 0 else f"{cond.connector} {cond.statement}")
        sql += " WHERE " + " ".join(parts)
    if result.order_by:
        sql += " " + result.order_by
    return sql
