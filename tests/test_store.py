import pytest
from structlog.testing import capture_logs

from api_spec_compiler.config import StoreCategories
from api_spec_compiler.models import (
    ApiColumn,
    ApiCondition,
    ApiParameter,
    ApiTableUsage,
    ParsedApiConfig,
)
from api_spec_compiler.store import ApiConfigSaver, MemoryRecordStore, StoreError


def _make_config() -> ParsedApiConfig:
    return ParsedApiConfig(
        name="收费站列表",
        description="查询收费站",
        http_method="GET",
        route_path="/api/stations",
        main_sql="SELECT station_code FROM vb_saas.toll_station",
        order_by_clause="ORDER BY station_code",
        parameters=[ApiParameter(name="stationCode", required=True)],
        conditions=[
            ApiCondition(statement="station_code = #{stationCode}", param_name="stationCode", order_no=0),
            ApiCondition(statement="deleted = false", order_no=1),
        ],
        columns=[ApiColumn(name="stationCode", description="收费站编号")],
        table_usages=[ApiTableUsage(table_schema="vb_saas", table_name="toll_station")],
    )


class FailingStore:
    def __init__(self, fail_on: str):
        self.fail_on = fail_on
        self.calls = []

    def store(self, category: str, fields: dict) -> str:
        self.calls.append(category)
        if category == self.fail_on:
            raise StoreError(f"rejected {category}")
        return f"id-{len(self.calls)}"


class TestApiConfigSaver:
    def test_one_store_call_per_row(self):
        store = MemoryRecordStore()
        result = ApiConfigSaver(store, "part-1").save(_make_config())

        assert len(store.records) == 6
        assert result.api_id == store.records[0]["id"]
        assert len(result.parameter_ids) == 1
        assert len(result.condition_ids) == 2
        assert len(result.column_ids) == 1
        assert len(result.table_usage_ids) == 1

    def test_parent_record_fields(self):
        store = MemoryRecordStore()
        ApiConfigSaver(store, "part-1").save(_make_config())

        parent = store.records[0]
        assert parent["category"] == StoreCategories().api
        assert parent["fields"]["ApiSql"] == "SELECT station_code FROM vb_saas.toll_station"
        assert parent["fields"]["ApiSqlOrderBy"] == "ORDER BY station_code"
        assert parent["fields"]["_PartId"] == "part-1"
        assert "VBIOMid" not in parent["fields"]

    def test_child_records_reference_parent(self):
        store = MemoryRecordStore()
        result = ApiConfigSaver(store, "part-1").save(_make_config())

        for record in store.records[1:]:
            assert record["fields"]["VBIOMid"] == result.api_id
            assert record["fields"]["_PartId"] == "part-1"

        conditions = [r["fields"] for r in store.records if r["category"] == StoreCategories().conditions]
        assert [c["Name"] for c in conditions] == ["条件1", "条件2"]
        assert conditions[0]["ParamName"] == "stationCode"
        assert conditions[1]["OrderNo"] == 1

    def test_custom_categories(self):
        store = MemoryRecordStore()
        categories = StoreCategories(api="apis", parameters="params")
        ApiConfigSaver(store, "p", categories).save(_make_config())
        assert store.records[0]["category"] == "apis"
        assert store.records[1]["category"] == "params"

    def test_store_error_propagates(self):
        store = FailingStore(fail_on=StoreCategories().conditions)
        with pytest.raises(StoreError):
            ApiConfigSaver(store, "p").save(_make_config())
        assert store.calls[-1] == StoreCategories().conditions

    def test_empty_config_saves_parent_only(self):
        store = MemoryRecordStore()
        config = ParsedApiConfig(name="x", description="", http_method="GET", route_path="/x")
        result = ApiConfigSaver(store, "p").save(config)
        assert len(store.records) == 1
        assert result.parameter_ids == []

    def test_unexpected_store_failure_is_logged_and_propagates(self):
        class BrokenStore:
            def store(self, category: str, fields: dict) -> str:
                raise ConnectionError("metadata store unreachable")

        with capture_logs() as logs:
            with pytest.raises(ConnectionError):
                ApiConfigSaver(BrokenStore(), "p").save(_make_config())

        failure = logs[-1]
        assert failure["event"] == "store call failed"
        assert failure["log_level"] == "error"
        assert failure["category"] == StoreCategories().api
        assert failure["name"] == "收费站列表"
