"""Data models for compiled API definitions.

Every compilation stage produces or consumes these models; the
aggregate ParsedApiConfig is what gets handed to the metadata store.
"""

from pydantic import BaseModel


class ApiParameter(BaseModel):
    """A single API input parameter."""

    name: str
    param_type: str = "string"  # string / int / bool / decimal / datetime / jsonarray / ...
    is_array: bool = False
    required: bool = False
    not_nullable: bool = False
    default_value: str = ""
    location: str = "query"  # query / body / path / header
    validation_rule: str = ""
    description: str = ""


class ApiCondition(BaseModel):
    """One WHERE fragment between top-level AND/OR connectors."""

    statement: str
    connector: str = "AND"  # AND / OR
    open_parens: str = ""
    close_parens: str = ""
    param_name: str = ""
    order_no: int = 0


class ApiColumn(BaseModel):
    """A result column returned by the API."""

    name: str
    column_type: str = "string"
    is_array: bool = False
    format: str = ""
    description: str = ""


class ApiTableUsage(BaseModel):
    """A schema-qualified table consumed by the generated query."""

    table_schema: str
    table_name: str
    resource_id: str | None = None
    column_id: int | None = None


class DescriptionFields(BaseModel):
    """Structured fields mined from a free-form requirement description."""

    name: str
    http_method: str
    route_path: str
    description: str
    parameters: list[ApiParameter] = []
    columns: list[ApiColumn] = []
    table_usages: list[ApiTableUsage] = []


class ParameterizationResult(BaseModel):
    """Sample SQL rewritten with #{name} placeholders."""

    rewritten_sql: str
    parameters: list[ApiParameter] = []
    value_to_name: dict[str, str] = {}
    warnings: list[str] = []
    suggestions: list[str] = []


class SplitResult(BaseModel):
    """Parameterized SQL split into projection, conditions and ordering."""

    main_sql: str
    conditions: list[ApiCondition] = []
    order_by: str = ""
    has_where: bool = False
    has_order_by: bool = False


class ParsedApiConfig(BaseModel):
    """The API definition record produced by one compilation."""

    name: str
    description: str
    http_method: str  # GET / POST / PUT / DELETE / PATCH
    route_path: str
    api_type: str = "query"
    result_type: str = "json"
    auth_type: str = "token"
    main_sql: str = ""  # never holds the WHERE or ORDER BY clause
    order_by_clause: str = ""
    count_sql: str = ""
    sample_sql: str = ""
    parameters: list[ApiParameter] = []
    conditions: list[ApiCondition] = []
    columns: list[ApiColumn] = []
    table_usages: list[ApiTableUsage] = []
    warnings: list[str] = []
    suggestions: list[str] = []


class SaveResult(BaseModel):
    """Ids handed back by the metadata store for one saved config."""

    api_id: str
    parameter_ids: list[str] = []
    condition_ids: list[str] = []
    column_ids: list[str] = []
    table_usage_ids: list[str] = []
