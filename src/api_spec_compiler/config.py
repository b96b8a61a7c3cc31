"""Compiler configuration.

All tunables live in an explicit CompilerConfig value that callers pass
into each stage; nothing is read from module-level mutable state.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

DEFAULT_TYPE_SYNONYMS = {
    "string": "string",
    "str": "string",
    "number": "int",
    "int": "int",
    "integer": "int",
    "long": "int",
    "boolean": "bool",
    "bool": "bool",
    "float": "decimal",
    "double": "decimal",
    "decimal": "decimal",
    "array": "jsonarray",
    "object": "jsonobject",
    "date": "datetime",
    "datetime": "datetime",
    "timestamp": "timestamp",
}

DEFAULT_FIELD_NAMES = {
    "收费站编号": "station_code",
    "收费站名称": "station_name",
    "道路名称": "road_name",
    "编号": "code",
    "名称": "name",
    "创建时间": "created_at",
    "更新时间": "updated_at",
}


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded."""


class CompilerConfig(BaseModel):
    """Defaults and lookup tables used by the compilation pipeline."""

    default_name: str = "Untitled API"
    default_http_method: str = "GET"
    default_route_path: str = "/api/unknown"
    description_preview_length: int = 100

    default_schema: str = "vb_saas"
    type_synonyms: dict[str, str] = DEFAULT_TYPE_SYNONYMS
    field_names: dict[str, str] = DEFAULT_FIELD_NAMES  # Chinese label -> column

    # Columns targeted by the WHERE idioms when synthesizing sample SQL
    code_column: str = "station_code"
    name_column: str = "station_name"
    road_column: str = "road_name"
    mandatory_predicates: list[str] = ["deleted = false"]

    context_window: int = 30
    field_lookback: int = 100
    function_lookback: int = 50

    api_type: str = "query"
    result_type: str = "json"
    auth_type: str = "token"

    def map_type(self, raw: str) -> str:
        """Map a free-form type name onto a platform type, defaulting to string."""
        return self.type_synonyms.get(raw.lower().strip(), "string")


class StoreCategories(BaseModel):
    """Metadata-store category names, one per record kind."""

    api: str = "E9E0821DA2AF2F84-vbio"
    parameters: str = "5FE8EE8DB6890877-vbio_parameters"
    conditions: str = "612F85E52FEB1B64-vbio_conditions"
    columns: str = "E25E49F06DA09BC7-vbio_columns"
    table_usages: str = "9BE9D4B3321E3DEC-vbio_column_usage"


class Settings(BaseModel):
    """Top-level layout of a configuration file."""

    compiler: CompilerConfig = CompilerConfig()
    categories: StoreCategories = StoreCategories()


def load_config(file_path: Path) -> Settings:
    """Load settings from a YAML file.

    Missing keys fall back to their defaults; an empty file yields the
    default settings.
    """
    text = file_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{file_path}: invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{file_path}: expected a mapping at the top level")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"{file_path}: {e}") from e
