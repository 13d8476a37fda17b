"""Unit tests for environment configuration."""

from pathlib import Path

import pytest

from model_relay.core.config import Config, ConfigError, get_config
from model_relay.core.config.schema import ConfigSchema
from model_relay.core.config.validation import load_all_specs, load_env_var


@pytest.mark.unit
class TestConfigDefaults:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("REGISTRY_PATH")
        cfg = Config.reset_singleton()

        assert cfg.port == 8082
        assert cfg.request_timeout == 90
        assert cfg.default_feature == "general"
        assert cfg.claude_max_tokens == 4096
        assert cfg.ollama_base_url == "http://localhost:11434"
        assert cfg.registry_path == Path("~/.config/model-relay/registry.json").expanduser()
        assert cfg.call_log_path is None
        assert cfg.fallback_provider == "Groq"
        assert cfg.fallback_model == "llama-3.3-70b-versatile"
        assert cfg.fallback_api_keys == ()

    def test_get_config_follows_reset(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        cfg = Config.reset_singleton()

        assert get_config() is cfg
        assert get_config().port == 9000


@pytest.mark.unit
class TestConfigParsing:
    def test_fallback_keys_are_split_and_trimmed(self, monkeypatch):
        monkeypatch.setenv("FALLBACK_API_KEYS", " k1, k2 ,,k3 ")

        assert Config.reset_singleton().fallback_api_keys == ("k1", "k2", "k3")

    def test_legacy_groq_keys_are_honoured(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEYS", "g1,g2")

        assert Config.reset_singleton().fallback_api_keys == ("g1", "g2")

    def test_explicit_fallback_keys_win_over_legacy(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEYS", "g1")
        monkeypatch.setenv("FALLBACK_API_KEYS", "f1")

        assert Config.reset_singleton().fallback_api_keys == ("f1",)

    def test_ollama_url_loses_trailing_slash(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu:11434/")

        assert Config.reset_singleton().ollama_base_url == "http://gpu:11434"

    def test_call_log_path_is_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("CALL_LOG_PATH", str(tmp_path / "calls.jsonl"))

        assert Config.reset_singleton().call_log_path == tmp_path / "calls.jsonl"


@pytest.mark.unit
class TestValidation:
    def test_non_integer_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "eighty")

        with pytest.raises(ConfigError) as exc_info:
            load_env_var(ConfigSchema.PORT)

        assert exc_info.value.env_var == "PORT"
        assert exc_info.value.value == "eighty"

    def test_out_of_range_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "70000")

        with pytest.raises(ConfigError, match="Validation failed"):
            load_env_var(ConfigSchema.PORT)

    def test_non_positive_timeout(self, monkeypatch):
        monkeypatch.setenv("REQUEST_TIMEOUT", "0")

        with pytest.raises(ConfigError):
            load_env_var(ConfigSchema.REQUEST_TIMEOUT)

    def test_load_all_specs_collects_errors(self, monkeypatch):
        monkeypatch.setenv("PORT", "nope")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        values = load_all_specs()

        assert isinstance(values["PORT"], ConfigError)
        assert values["LOG_LEVEL"] == "DEBUG"

    def test_markdown_docs_cover_every_variable(self):
        docs = ConfigSchema.generate_markdown_docs()

        for spec in ConfigSchema.all_specs().values():
            assert f"`{spec.name}`" in docs

    def test_every_variable_uses_a_supported_type(self):
        for spec in ConfigSchema.all_specs().values():
            assert spec.type_hint in (int, str, tuple), spec.name

    def test_tuple_variable_drops_empty_entries(self, monkeypatch):
        monkeypatch.setenv("FALLBACK_API_KEYS", " a, ,b,")

        assert load_env_var(ConfigSchema.FALLBACK_API_KEYS) == ("a", "b")
