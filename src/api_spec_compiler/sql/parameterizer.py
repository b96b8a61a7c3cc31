"""SQL parameterization.

Replaces the literal values of a sample statement with #{name}
placeholders, inferring a parameter name and type for each literal.
Complexity heuristics never stop processing; they only add warnings
and suggestions to the result for a human reviewer.
"""

import re
from dataclasses import dataclass

from api_spec_compiler.config import CompilerConfig
from api_spec_compiler.models import ApiParameter, ParameterizationResult

STRING_LITERAL = re.compile(r"'((?:[^']|'')*)'")
NUMBER_LITERAL = re.compile(r"\b(\d+(?:\.\d+)?)\b")
WHERE_OR_HAVING = re.compile(r"\b(?:WHERE|HAVING)\b", re.IGNORECASE)
FIELD_BEFORE_VALUE = re.compile(r"([\w.\"`]+)\s*(?:>=|<=|!=|=|>|<|\bLIKE|\bIN)\s*$", re.IGNORECASE)
OPEN_FUNCTION_CALL = re.compile(r"\w+\([^)]*$")

SUBQUERY = re.compile(r"\(\s*SELECT\b", re.IGNORECASE)
JOIN = re.compile(r"\bJOIN\b", re.IGNORECASE)
CASE_WHEN = re.compile(r"\bCASE\s+WHEN\b", re.IGNORECASE)
FUNCTION_WITH_STRING = re.compile(r"\w+\([^)]*['\"][^'\"]+['\"]")
IN_OR_ANY = re.compile(r"\b(?:IN|ANY)\s*\(", re.IGNORECASE)

_SQL_TYPES = {"string": "string", "int": "int", "decimal": "decimal"}


@dataclass(frozen=True)
class DetectedValue:
    """A literal found in the sample SQL."""

    literal_text: str  # STA001
    quoted_form: str  # 'STA001', exactly as it appears in the SQL
    source_offset: int
    inferred_type: str  # string / int / decimal
    context_window: str
    inferred_field_name: str | None = None


def check_complexity(sql: str) -> tuple[list[str], list[str]]:
    """Return (warnings, suggestions) for constructs that need a human look."""
    warnings = []
    suggestions = []

    if SUBQUERY.search(sql):
        warnings.append("Subquery detected; parameter extraction may be incomplete")
        suggestions.append("Check whether values inside the subquery should be parameters")

    join_count = len(JOIN.findall(sql))
    if join_count > 2:
        warnings.append(f"{join_count} JOINs detected; the statement is complex")
        suggestions.append("Check that values in JOIN conditions were recognized correctly")

    if CASE_WHEN.search(sql):
        warnings.append("CASE WHEN expression detected")
        suggestions.append("Check whether the CASE WHEN comparison values should be parameters")

    if FUNCTION_WITH_STRING.search(sql):
        warnings.append("Function call with a string argument detected")
        suggestions.append("Check whether function arguments such as date formats should be parameters")

    if IN_OR_ANY.search(sql):
        warnings.append("IN or ANY clause detected")
        suggestions.append("Check the array parameter format, e.g. #{paramName}::type[]")

    return warnings, suggestions


def _context(sql: str, start: int, end: int, window: int) -> str:
    return sql[max(0, start - window): min(len(sql), end + window)]


def infer_field_name(sql: str, offset: int, lookback: int = 100) -> str | None:
    """Return the column compared against the value at offset, if any."""
    before = sql[max(0, offset - lookback): offset]
    match = FIELD_BEFORE_VALUE.search(before)
    return match.group(1) if match else None


def _in_function_call(sql: str, offset: int, lookback: int) -> bool:
    before = sql[max(0, offset - lookback): offset]
    return bool(OPEN_FUNCTION_CALL.search(before))


def detect_values(sql: str, config: CompilerConfig | None = None) -> list[DetectedValue]:
    """Find parameterizable literals, ordered by their position in the SQL.

    String literals are collected anywhere in the statement. Numbers are
    only collected from the first WHERE/HAVING onward, and never from
    inside a string literal or an unclosed function call like ROUND(x, 0).
    """
    config = config or CompilerConfig()
    values = []
    string_spans = []

    for match in STRING_LITERAL.finditer(sql):
        start, end = match.span()
        string_spans.append((start, end))
        values.append(
            DetectedValue(
                literal_text=match.group(1),
                quoted_form=match.group(0),
                source_offset=start,
                inferred_type="string",
                context_window=_context(sql, start, end, config.context_window),
                inferred_field_name=infer_field_name(sql, start, config.field_lookback),
            )
        )

    where = WHERE_OR_HAVING.search(sql)
    if where:
        for match in NUMBER_LITERAL.finditer(sql, where.start()):
            start, end = match.span()
            if any(s <= start < e for s, e in string_spans):
                continue
            if _in_function_call(sql, start, config.function_lookback):
                continue
            literal = match.group(1)
            values.append(
                DetectedValue(
                    literal_text=literal,
                    quoted_form=literal,
                    source_offset=start,
                    inferred_type="decimal" if "." in literal else "int",
                    context_window=_context(sql, start, end, config.context_window),
                    inferred_field_name=infer_field_name(sql, start, config.field_lookback),
                )
            )

    return sorted(values, key=lambda v: v.source_offset)


def _clean_field_name(field_name: str) -> str:
    """Drop quoting and any schema/table prefix: t."station_code" -> station_code."""
    return re.sub(r"[\"'`]", "", field_name).split(".")[-1]


def _normalize(name: str) -> str:
    return name.replace("_", "").lower()


def field_to_param_name(field_name: str) -> str:
    """station_code -> stationCode"""
    return re.sub(r"_([a-z])", lambda m: m.group(1).upper(), _clean_field_name(field_name))


def unique_name(base: str, used: set[str]) -> str:
    name = base
    counter = 1
    while name in used:
        name = f"{base}{counter}"
        counter += 1
    return name


def _find_declared(field_name: str | None, declared: list[ApiParameter]) -> ApiParameter | None:
    if not field_name:
        return None
    field_key = _normalize(_clean_field_name(field_name))
    for param in declared:
        if not param.name:
            continue
        param_key = _normalize(param.name)
        if param_key == field_key or param_key in field_key:
            return param
    return None


def assign_names(values: list[DetectedValue], declared: list[ApiParameter]) -> list[str]:
    """Pick a parameter name for each detected value, in order.

    A matching declared parameter lends its name as-is, so every literal
    compared against that field (both ends of a date range, say) shares
    one placeholder and one definition. Inferred and generic names get a
    numeric suffix until unique within this call.
    """
    names = []
    used: set[str] = set()

    for value in values:
        param = _find_declared(value.inferred_field_name, declared)
        if param:
            name = param.name
        elif value.inferred_field_name:
            name = unique_name(field_to_param_name(value.inferred_field_name), used)
        else:
            name = unique_name("param", used)
        used.add(name)
        names.append(name)

    return names


def _definition(name: str, value: DetectedValue, declared: list[ApiParameter]) -> ApiParameter:
    for param in declared:
        if param.name == name:
            return param.model_copy()

    return ApiParameter(
        name=name,
        param_type=_SQL_TYPES.get(value.inferred_type, "string"),
        required=False,
        location="query",
        description=f"Inferred from SQL (field: {value.inferred_field_name or 'unknown'})",
    )


def parameterize(
    sql: str,
    declared_params: list[ApiParameter] | None = None,
    config: CompilerConfig | None = None,
) -> ParameterizationResult:
    """Replace the literals of a sample statement with #{name} placeholders.

    Declared parameters only supply names and definitions; one that
    matches no literal does not appear in the result. Parameters are
    listed in the order the back-to-front rewrite first reaches them.
    """
    declared = list(declared_params or [])
    warnings, suggestions = check_complexity(sql)

    values = detect_values(sql, config)
    names = assign_names(values, declared)

    # Replace back to front so earlier offsets stay valid; each name is
    # defined the first time this pass reaches it
    rewritten = sql
    parameters = []
    for value, name in sorted(zip(values, names), key=lambda p: p[0].source_offset, reverse=True):
        start = value.source_offset
        end = start + len(value.quoted_form)
        rewritten = f"{rewritten[:start]}#{{{name}}}{rewritten[end:]}"
        if not any(p.name == name for p in parameters):
            parameters.append(_definition(name, value, declared))

    value_to_name: dict[str, str] = {}
    for value, name in zip(values, names):
        value_to_name.setdefault(value.literal_text, name)

    return ParameterizationResult(
        rewritten_sql=rewritten,
        parameters=parameters,
        value_to_name=value_to_name,
        warnings=warnings,
        suggestions=suggestions,
    )
