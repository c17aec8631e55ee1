"""
Unit tests for configuration loading and target resolution.
"""
import pytest

from lightrag_plugin.config import (
    DEFAULT_PROXY_URL,
    ForwardingTarget,
    LightRAGConfig,
    get_lightrag_config,
    reload_lightrag_config,
    resolve_target,
)
from lightrag_plugin.validators import validate_document_id


def user_plugins(url):
    return {"lightrag": {"LIGHTRAG_PROXY_URL": url}}


def test_user_setting_wins_over_deployment_default():
    config = LightRAGConfig(proxy_url="http://deploy:8081")

    target = resolve_target(user_plugins("http://user:7000"), config)

    assert target.base_url == "http://user:7000"


def test_deployment_default_used_without_user_setting():
    config = LightRAGConfig(proxy_url="http://deploy:8081")

    assert resolve_target({}, config).base_url == "http://deploy:8081"
    assert resolve_target(None, config).base_url == "http://deploy:8081"
    assert resolve_target(user_plugins("   "), config).base_url == "http://deploy:8081"


def test_hardcoded_fallback():
    assert resolve_target(None, LightRAGConfig()).base_url == DEFAULT_PROXY_URL
    assert DEFAULT_PROXY_URL == "http://localhost:8081"


def test_malformed_user_plugins_are_ignored():
    config = LightRAGConfig(proxy_url="http://deploy:8081")

    assert resolve_target({"lightrag": "not-a-dict"}, config).base_url == "http://deploy:8081"
    assert resolve_target(user_plugins(None), config).base_url == "http://deploy:8081"


def test_target_strips_trailing_slash_and_joins_paths():
    target = ForwardingTarget("http://proxy:8081/ ")

    assert target.base_url == "http://proxy:8081"
    assert target.url_for("/v1/documents") == "http://proxy:8081/v1/documents"
    assert target.url_for("v1/documents") == "http://proxy:8081/v1/documents"


def test_from_env(monkeypatch):
    monkeypatch.setenv("LIGHTRAG_PROXY_URL", "http://env:8082")
    monkeypatch.setenv("LIGHTRAG_TIMEOUT", "12.5")
    monkeypatch.setenv("LIGHTRAG_MAX_UPLOAD_MB", "2")
    monkeypatch.setenv("LIGHTRAG_MODEL", "lightrag:test")

    config = LightRAGConfig.from_env()

    assert config.proxy_url == "http://env:8082"
    assert config.timeout == 12.5
    assert config.max_upload_bytes == 2 * 1024 * 1024
    assert config.model == "lightrag:test"


def test_from_env_defaults(monkeypatch):
    for name in ("LIGHTRAG_PROXY_URL", "LIGHTRAG_TIMEOUT", "LIGHTRAG_MAX_UPLOAD_MB", "LIGHTRAG_MODEL"):
        monkeypatch.delenv(name, raising=False)

    config = LightRAGConfig.from_env()

    assert config.proxy_url is None
    assert config.timeout == 300.0
    assert config.max_upload_bytes == 50 * 1024 * 1024
    assert config.model == "lightrag:latest"


def test_reload_reads_environment_again(monkeypatch):
    monkeypatch.setenv("LIGHTRAG_PROXY_URL", "http://first:1")
    assert get_lightrag_config().proxy_url == "http://first:1"

    monkeypatch.setenv("LIGHTRAG_PROXY_URL", "http://second:2")
    assert get_lightrag_config().proxy_url == "http://first:1"
    assert reload_lightrag_config().proxy_url == "http://second:2"


@pytest.mark.parametrize("value", ["abc", "", "-1", "0", "nan"])
def test_from_env_invalid_numbers_fall_back_to_defaults(monkeypatch, value):
    monkeypatch.setenv("LIGHTRAG_TIMEOUT", value)
    monkeypatch.setenv("LIGHTRAG_MAX_UPLOAD_MB", value)

    config = LightRAGConfig.from_env()

    assert config.timeout == 300.0
    assert config.max_upload_bytes == 50 * 1024 * 1024


def test_validate_document_id():
    assert validate_document_id("doc-123")
    assert validate_document_id("v1.2.pdf")
    assert not validate_document_id(".")
    assert not validate_document_id("..")
    assert not validate_document_id("a/b")
    assert not validate_document_id("")
