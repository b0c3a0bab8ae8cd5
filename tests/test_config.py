"""Tests for config loading and env var resolution."""

from __future__ import annotations

import pytest

from aperio.config import (
    ALL_SOURCES,
    DEFAULT_AUDIO_POOL,
    get_aggregate_sources,
    get_audio_pool,
    get_llm_task_config,
    get_log_file,
    get_log_level,
    get_service_config,
    get_source_timeout,
    is_demo_key,
    load_config,
)


def test_load_config(sample_config):
    """Config loads and has expected structure."""
    assert "llm" in sample_config
    assert "market" in sample_config
    assert "aggregate" in sample_config


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_env_var_resolution(tmp_path, monkeypatch):
    """Environment variables in ${VAR} format are resolved."""
    monkeypatch.setenv("TEST_API_KEY", "my-secret-key")
    monkeypatch.delenv("UNSET_VAR_FOR_TEST", raising=False)
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("""
market:
  api_key: "${TEST_API_KEY}"
  base_url: "https://${UNSET_VAR_FOR_TEST}example.com/query"
economic:
  api_key: "${UNSET_VAR_FOR_TEST}"
""")
    config = load_config(str(cfg_path))
    assert config["market"]["api_key"] == "my-secret-key"
    assert config["market"]["base_url"] == "https://example.com/query"
    assert config["economic"]["api_key"] == ""


def test_dotenv_does_not_override_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APERIO_TEST_KEEP", "from-env")
    monkeypatch.setenv("APERIO_TEST_NEW", "")
    monkeypatch.delenv("APERIO_TEST_NEW")
    (tmp_path / ".env").write_text(
        "# comment\nAPERIO_TEST_KEEP=from-file\nAPERIO_TEST_NEW='quoted'\n"
    )
    (tmp_path / "config.yaml").write_text(
        'a: "${APERIO_TEST_KEEP}"\nb: "${APERIO_TEST_NEW}"\n'
    )
    config = load_config("config.yaml")
    assert config == {"a": "from-env", "b": "quoted"}


def test_get_llm_task_config(sample_config):
    """Task-to-provider mapping works."""
    cfg = get_llm_task_config(sample_config, "search")
    assert cfg["provider_name"] == "mock"
    assert cfg["provider_type"] == "openai_compatible"
    assert cfg["model"] == "test-model"
    assert cfg["max_tokens"] == 900
    assert cfg["max_retries"] == 2

    article = get_llm_task_config(sample_config, "article")
    assert article["provider_type"] == "anthropic"
    assert article["max_tokens"] == 3000


def test_missing_key_selects_demo_provider():
    """An unset or "demo" key forces the canned provider."""
    config = {
        "llm": {
            "providers": {
                "perplexity": {"type": "openai_compatible", "api_key": "demo"},
                "claude": {"type": "anthropic", "api_key": ""},
            },
            "tasks": {"article": {"provider": "claude"}},
        },
    }
    assert get_llm_task_config(config, "search")["provider_type"] == "demo"
    assert get_llm_task_config(config, "article")["provider_type"] == "demo"
    assert get_llm_task_config({}, "dialogue")["provider_type"] == "demo"


def test_is_demo_key():
    assert is_demo_key("")
    assert is_demo_key(None)
    assert is_demo_key("demo")
    assert not is_demo_key("sk-live")


def test_get_service_config_defaults():
    cfg = get_service_config({}, "images")
    assert cfg["model"] == "gemini-2.0-flash-exp"
    assert cfg["api_key"] == ""
    assert cfg["timeout"] == 30
    assert cfg["max_retries"] == 0


def test_get_service_config_overrides(sample_config):
    cfg = get_service_config(sample_config, "market")
    assert cfg["api_key"] == "av-test"
    assert cfg["base_url"] == "https://www.alphavantage.co/query"


def test_aggregate_settings():
    assert get_aggregate_sources({}) == ALL_SOURCES
    assert get_aggregate_sources({"aggregate": {"sources": ["news"]}}) == ["news"]
    assert get_source_timeout({}) is None
    assert get_source_timeout({"aggregate": {"source_timeout": 5}}) == 5.0


def test_audio_and_logging_settings(sample_config):
    assert get_audio_pool({}) == DEFAULT_AUDIO_POOL
    assert get_log_level(sample_config) == "DEBUG"
    assert get_log_file(sample_config) == ""
    assert get_log_file({}) == "data/aperio.log"
