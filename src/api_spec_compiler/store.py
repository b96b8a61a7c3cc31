"""Hand compiled API definitions to the platform's metadata store.

The store itself is external; anything with a
``store(category, fields) -> id`` method will do. Records use the
platform's field names.
"""

from typing import Protocol

import structlog

from api_spec_compiler.config import StoreCategories
from api_spec_compiler.models import (
    ApiColumn,
    ApiCondition,
    ApiParameter,
    ApiTableUsage,
    ParsedApiConfig,
    SaveResult,
)

logger = structlog.get_logger(__name__)


class StoreError(Exception):
    """Raised when the metadata store rejects a record."""


class RecordStore(Protocol):
    def store(self, category: str, fields: dict) -> str: ...


class MemoryRecordStore:
    """Keeps records in a list and hands out sequential ids."""

    def __init__(self):
        self.records: list[dict] = []

    def store(self, category: str, fields: dict) -> str:
        record_id = f"{category}-{len(self.records) + 1}"
        self.records.append({"id": record_id, "category": category, "fields": dict(fields)})
        return record_id


def api_record(config: ParsedApiConfig) -> dict:
    return {
        "Name": config.name,
        "Description": config.description,
        "ApiType": config.api_type,
        "HttpMethod": config.http_method,
        "RoutePath": config.route_path,
        "ResultType": config.result_type,
        "AuthType": config.auth_type,
        "ApiSql": config.main_sql,
        "ApiSqlOrderBy": config.order_by_clause,
        "CountSql": config.count_sql,
        "ApiResponseWrapper": "",
    }


def parameter_record(param: ApiParameter) -> dict:
    return {
        "Name": param.name,
        "ParamName": param.name,
        "ParamType": param.param_type,
        "ArrayType": param.is_array,
        "Required": param.required,
        "NotNullable": param.not_nullable,
        "ParamDefault": param.default_value,
        "ParamIn": param.location,
        "ValidationRule": param.validation_rule,
        "ParamDesc": param.description,
    }


def condition_record(cond: ApiCondition) -> dict:
    return {
        "Name": f"条件{cond.order_no + 1}",
        "CondStatement": cond.statement,
        "CondConnector": cond.connector,
        "OpenParenthesis": cond.open_parens,
        "CloseParenthesis": cond.close_parens,
        "ParamName": cond.param_name,
        "OrderNo": cond.order_no,
    }


def column_record(column: ApiColumn) -> dict:
    return {
        "Name": column.name,
        "ColumnName": column.name,
        "ColumnDesc": column.description,
        "ColumnType": column.column_type,
        "ArrayType": column.is_array,
        "ColumnFormat": column.format,
    }


def table_usage_record(usage: ApiTableUsage) -> dict:
    return {
        "Name": usage.table_name,
        "TableSchema": usage.table_schema,
        "TableName": usage.table_name,
        "ResourceId": usage.resource_id or "",
        "ColumnId": usage.column_id or 0,
    }


class ApiConfigSaver:
    """Writes a ParsedApiConfig as one parent record plus its child rows."""

    def __init__(self, store: RecordStore, partition_id: str, categories: StoreCategories | None = None):
        self.store = store
        self.partition_id = partition_id
        self.categories = categories or StoreCategories()

    def _save(self, category: str, fields: dict) -> str:
        fields = {**fields, "_PartId": self.partition_id}
        try:
            return self.store.store(category, fields)
        except StoreError:
            logger.error("store rejected record", category=category, name=fields.get("Name"))
            raise
        except Exception:
            logger.exception("store call failed", category=category, name=fields.get("Name"))
            raise

    def _save_children(self, category: str, records: list[dict], api_id: str) -> list[str]:
        return [self._save(category, {**record, "VBIOMid": api_id}) for record in records]

    def save(self, config: ParsedApiConfig) -> SaveResult:
        """Store the config; any StoreError propagates to the caller."""
        logger.info("saving api config", name=config.name, partition_id=self.partition_id)

        api_id = self._save(self.categories.api, api_record(config))
        result = SaveResult(
            api_id=api_id,
            parameter_ids=self._save_children(
                self.categories.parameters, [parameter_record(p) for p in config.parameters], api_id
            ),
            condition_ids=self._save_children(
                self.categories.conditions, [condition_record(c) for c in config.conditions], api_id
            ),
            column_ids=self._save_children(
                self.categories.columns, [column_record(c) for c in config.columns], api_id
            ),
            table_usage_ids=self._save_children(
                self.categories.table_usages, [table_usage_record(t) for t in config.table_usages], api_id
            ),
        )

        logger.info(
            "api config saved",
            api_id=api_id,
            parameters=len(result.parameter_ids),
            conditions=len(result.condition_ids),
            columns=len(result.column_ids),
            table_usages=len(result.table_usage_ids),
        )
        return result
