"""API definition compiler — requirement text in, ParsedApiConfig out."""

import re

from api_spec_compiler.config import CompilerConfig
from api_spec_compiler.extractor import description, sample_sql
from api_spec_compiler.models import ParsedApiConfig
from api_spec_compiler.sql import parameterizer, splitter

SELECT_LIST = re.compile(r"^\s*SELECT\s+(?!DISTINCT\b).+?\s+(FROM\b.*)$", re.IGNORECASE | re.DOTALL)
FROM = re.compile(r"\bFROM\b", re.IGNORECASE)


def build_count_sql(main_sql: str) -> str:
    """Derive `SELECT COUNT(1) FROM ...` from a single-table main SQL."""
    if len(FROM.findall(main_sql)) != 1:
        return ""
    match = SELECT_LIST.match(main_sql)
    if not match:
        return ""
    return f"SELECT COUNT(1) {match.group(1)}"


class ApiConfigCompiler:
    """Runs extraction, sample resolution, parameterization and splitting."""

    def __init__(self, config: CompilerConfig | None = None):
        self.config = config or CompilerConfig()

    def compile(self, text: str) -> ParsedApiConfig:
        """Compile one requirement description into an API definition record."""
        fields = description.extract(text, self.config)
        sample = sample_sql.resolve(text, fields, self.config)
        params = parameterizer.parameterize(sample, fields.parameters, self.config)
        parts = splitter.split(params.rewritten_sql)

        return ParsedApiConfig(
            name=fields.name,
            description=fields.description,
            http_method=fields.http_method,
            route_path=fields.route_path,
            api_type=self.config.api_type,
            result_type=self.config.result_type,
            auth_type=self.config.auth_type,
            main_sql=parts.main_sql,
            order_by_clause=parts.order_by,
            count_sql=build_count_sql(parts.main_sql),
            sample_sql=sample,
            parameters=params.parameters,
            conditions=parts.conditions,
            columns=fields.columns,
            table_usages=fields.table_usages,
            warnings=params.warnings,
            suggestions=params.suggestions,
        )


def compile_description(text: str, config: CompilerConfig | None = None) -> ParsedApiConfig:
    return ApiConfigCompiler(config).compile(text)
