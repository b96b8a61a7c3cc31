from pathlib import Path

from api_spec_compiler.config import CompilerConfig
from api_spec_compiler.extractor.description import extract
from api_spec_compiler.extractor.sample_sql import (
    build_order_by_clause,
    build_where_clause,
    camel_to_snake,
    resolve,
)
from api_spec_compiler.models import ApiColumn

FIXTURES = Path(__file__).parent / "fixtures"


def _columns(*names: str) -> list[ApiColumn]:
    return [ApiColumn(name=n) for n in names]


class TestCamelToSnake:
    def test_converts_camel_case(self):
        assert camel_to_snake("stationCode") == "station_code"
        assert camel_to_snake("createdAtTime") == "created_at_time"

    def test_leaves_snake_case_alone(self):
        assert camel_to_snake("road_name") == "road_name"


class TestResolve:
    def test_fenced_block_used_verbatim(self):
        text = (FIXTURES / "toll-station-query.md").read_text(encoding="utf-8")
        sql = resolve(text, extract(text))
        assert sql.startswith("SELECT station_code, station_name, road_name\nFROM vb_saas.toll_station")
        assert sql.endswith("ORDER BY station_code")

    def test_synthesized_from_description(self):
        text = (FIXTURES / "station-list.md").read_text(encoding="utf-8")
        sql = resolve(text, extract(text))
        assert sql == (
            "SELECT station_code, station_name, created_at FROM vb_saas.toll_station "
            "WHERE station_code = 'STA001' AND road_name = 'G15' AND deleted = false "
            "ORDER BY station_code DESC"
        )

    def test_star_when_no_columns(self):
        text = "**表名**: `ods.orders`"
        sql = resolve(text, extract(text))
        assert sql == "SELECT * FROM ods.orders WHERE deleted = false"

    def test_empty_without_sql_or_table(self):
        text = "# 接口\n\n没有表信息"
        assert resolve(text, extract(text)) == ""


class TestWhereClause:
    def test_mandatory_predicate_always_present(self):
        assert build_where_clause("", CompilerConfig()) == "deleted = false"

    def test_name_contains_becomes_like(self):
        clause = build_where_clause("收费站名称包含北京，按编号排序", CompilerConfig())
        assert clause == "station_name LIKE '%北京%' AND deleted = false"

    def test_road_fuzzy_match(self):
        clause = build_where_clause("道路名称为沈海，支持模糊查询", CompilerConfig())
        assert clause == "road_name LIKE '%沈海%' AND deleted = false"

    def test_road_contains(self):
        clause = build_where_clause("道路包含G15", CompilerConfig())
        assert clause == "road_name LIKE '%G15%' AND deleted = false"

    def test_code_equality_uses_configured_column(self):
        config = CompilerConfig(code_column="order_code", mandatory_predicates=[])
        assert build_where_clause("订单编号为A100的订单", config) == "order_code = 'A100'"


class TestOrderByClause:
    def test_chinese_field_translated(self):
        clause = build_order_by_clause("结果按收费站名称升序排列", [], CompilerConfig())
        assert clause == "station_name"

    def test_descending(self):
        clause = build_order_by_clause("按创建时间降序", [], CompilerConfig())
        assert clause == "created_at DESC"

    def test_unknown_field_kept(self):
        assert build_order_by_clause("按 sort_no 升序", [], CompilerConfig()) == "sort_no"

    def test_defaults_to_code_or_id_column(self):
        columns = _columns("stationName", "stationCode", "roadName")
        assert build_order_by_clause("", columns, CompilerConfig()) == "station_code"

    def test_defaults_to_first_column(self):
        columns = _columns("stationName", "roadName")
        assert build_order_by_clause("", columns, CompilerConfig()) == "station_name"

    def test_no_columns_no_order(self):
        assert build_order_by_clause("", [], CompilerConfig()) == ""
