"""
Configuration tests - endpoint settings resolution and validation.
"""

import importlib
import os

import pytest

from src.core import config


@pytest.fixture
def clean_env(monkeypatch):
    """Remove AI settings so defaults apply."""
    for name in ("OLLAMA_URL", "OLLAMA_MODEL", "OLLAMA_TIMEOUT_SEC", "OLLAMA_TEMPERATURE",
                 "OLLAMA_TOP_P", "AI_AUDIT_ENABLED", "DEBUG"):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch


@pytest.fixture
def reloaded_config(clean_env):
    """Reload module constants from a custom environment."""
    clean_env.setenv("OLLAMA_MODEL", "phi3")
    clean_env.setenv("AI_AUDIT_ENABLED", "false")
    importlib.reload(config)

    yield config

    os.environ.pop("OLLAMA_MODEL", None)
    os.environ.pop("AI_AUDIT_ENABLED", None)
    importlib.reload(config)


class TestOllamaSettings:
    """Test endpoint settings resolution."""

    def test_defaults(self, clean_env):
        settings = config.get_ollama_settings()

        assert settings.base_url == "http://localhost:11434"
        assert settings.model == "llama3.2"
        assert settings.timeout_sec == 120.0
        assert settings.temperature == 0.7
        assert settings.top_p == 0.9

    def test_trailing_slash_stripped(self, clean_env):
        clean_env.setenv("OLLAMA_URL", "http://gpu-box:11434///")

        assert config.get_ollama_url() == "http://gpu-box:11434"

    def test_blank_values_use_defaults(self, clean_env):
        clean_env.setenv("OLLAMA_MODEL", "  ")
        clean_env.setenv("OLLAMA_TIMEOUT_SEC", "")

        assert config.get_ollama_model() == "llama3.2"
        assert config.get_ollama_timeout() == 120.0

    def test_unparseable_number_uses_default(self, clean_env):
        clean_env.setenv("OLLAMA_TEMPERATURE", "warm")

        assert config.get_ollama_settings().temperature == 0.7

    def test_module_constants_follow_environment(self, reloaded_config):
        assert reloaded_config.OLLAMA_MODEL == "phi3"
        assert reloaded_config.AI_AUDIT_ENABLED is False

    def test_reload_tolerates_bad_numeric_values(self, clean_env):
        clean_env.setenv("OLLAMA_TIMEOUT_SEC", "")
        clean_env.setenv("OLLAMA_TEMPERATURE", "warm")
        clean_env.setenv("OLLAMA_TOP_P", "  ")

        try:
            importlib.reload(config)

            assert config.OLLAMA_TIMEOUT_SEC == 120.0
            assert config.OLLAMA_TEMPERATURE == 0.7
            assert config.OLLAMA_TOP_P == 0.9
        finally:
            for name in ("OLLAMA_TIMEOUT_SEC", "OLLAMA_TEMPERATURE", "OLLAMA_TOP_P"):
                os.environ.pop(name, None)
            importlib.reload(config)


class TestFlags:
    """Test boolean flags."""

    def test_audit_enabled_by_default(self, clean_env):
        assert config.is_ai_audit_enabled() is True

    @pytest.mark.parametrize("value, expected", [("true", True), ("TRUE", True), ("false", False), ("0", False)])
    def test_audit_flag_values(self, clean_env, value, expected):
        clean_env.setenv("AI_AUDIT_ENABLED", value)

        assert config.is_ai_audit_enabled() is expected

    def test_debug_flag(self, clean_env):
        assert config.debug_enabled() is False
        clean_env.setenv("DEBUG", "true")
        assert config.debug_enabled() is True


class TestValidateAIConfig:
    """Test configuration validation."""

    def test_defaults_are_valid(self, clean_env):
        assert config.validate_ai_config() == []

    def test_invalid_values_reported(self, clean_env):
        clean_env.setenv("OLLAMA_URL", "localhost:11434")
        clean_env.setenv("OLLAMA_TIMEOUT_SEC", "-1")
        clean_env.setenv("OLLAMA_TEMPERATURE", "3.5")
        clean_env.setenv("OLLAMA_TOP_P", "0")

        issues = config.validate_ai_config()

        assert len(issues) == 4
        assert any("OLLAMA_URL" in issue for issue in issues)
        assert any("OLLAMA_TOP_P" in issue for issue in issues)
