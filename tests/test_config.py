from pathlib import Path

import pytest

from api_spec_compiler.config import CompilerConfig, ConfigError, Settings, load_config

FIXTURES = Path(__file__).parent / "fixtures"


class TestCompilerConfig:
    def test_defaults(self):
        config = CompilerConfig()
        assert config.default_name == "Untitled API"
        assert config.default_schema == "vb_saas"
        assert config.mandatory_predicates == ["deleted = false"]

    def test_map_type(self):
        config = CompilerConfig()
        assert config.map_type(" Integer ") == "int"
        assert config.map_type("boolean") == "bool"
        assert config.map_type("array") == "jsonarray"
        assert config.map_type("uuid") == "string"


class TestLoadConfig:
    def test_loads_yaml(self):
        settings = load_config(FIXTURES / "settings.yaml")
        assert settings.compiler.default_schema == "ods"
        assert settings.compiler.default_name == "未命名API"
        assert settings.compiler.mandatory_predicates == ["deleted = false", "tenant_id = 'T1'"]
        assert settings.compiler.default_http_method == "GET"
        assert settings.categories.api == "test-api"
        assert settings.categories.conditions == Settings().categories.conditions

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == Settings()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("compiler: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "wrong.yaml"
        path.write_text("compiler:\n  context_window: lots\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)
