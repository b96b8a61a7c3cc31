from api_spec_compiler.models import ApiCondition, ApiParameter, ApiTableUsage, ParsedApiConfig


class TestApiParameter:
    def test_create_minimal_param(self):
        p = ApiParameter(name="stationCode")
        assert p.param_type == "string"
        assert p.required is False
        assert p.location == "query"
        assert p.description == ""

    def test_create_declared_param(self):
        p = ApiParameter(
            name="pageSize",
            param_type="int",
            required=True,
            default_value="20",
            validation_rule="min:1",
        )
        assert p.required is True
        assert p.default_value == "20"


class TestApiCondition:
    def test_defaults(self):
        c = ApiCondition(statement="deleted = false")
        assert c.connector == "AND"
        assert c.open_parens == ""
        assert c.param_name == ""
        assert c.order_no == 0


class TestParsedApiConfig:
    def test_create_minimal_config(self):
        config = ParsedApiConfig(
            name="收费站列表",
            description="",
            http_method="GET",
            route_path="/api/stations",
        )
        assert config.api_type == "query"
        assert config.result_type == "json"
        assert config.auth_type == "token"
        assert config.parameters == []
        assert config.warnings == []

    def test_serialization_roundtrip(self):
        config = ParsedApiConfig(
            name="收费站列表",
            description="查询",
            http_method="GET",
            route_path="/api/stations",
            table_usages=[ApiTableUsage(table_schema="vb_saas", table_name="toll_station")],
        )
        data = config.model_dump()
        config2 = ParsedApiConfig(**data)
        assert config2 == config
        assert config2.table_usages[0].resource_id is None
