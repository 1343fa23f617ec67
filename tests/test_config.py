"""Tests for olsearch.config -- configuration validation and env loading."""

from __future__ import annotations

import pytest

from olsearch.config import OLConfig


class TestOLConfigValidation:
    def test_defaults_are_valid(self) -> None:
        config = OLConfig()
        assert config.base_url == "https://openlibrary.org"
        assert config.search_path == "/search.json"
        assert config.timeout == 10.0
        assert config.cli_limit == 5
        assert config.gui_limit == 10
        assert config.verify_ssl is True

    def test_search_url(self) -> None:
        assert OLConfig().search_url == "https://openlibrary.org/search.json"

    def test_empty_base_url(self) -> None:
        with pytest.raises(ValueError, match="base_url"):
            OLConfig(base_url="")

    def test_search_path_needs_slash(self) -> None:
        with pytest.raises(ValueError, match="search_path"):
            OLConfig(search_path="search.json")

    def test_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError, match="timeout"):
            OLConfig(timeout=0)

    def test_limits_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="cli_limit"):
            OLConfig(cli_limit=0)
        with pytest.raises(ValueError, match="gui_limit"):
            OLConfig(gui_limit=-1)

    def test_custom_values(self) -> None:
        config = OLConfig(base_url="http://mirror:9090", timeout=3.0, cli_limit=7, verify_ssl=False)
        assert config.search_url == "http://mirror:9090/search.json"
        assert config.cli_limit == 7
        assert config.verify_ssl is False

    def test_frozen(self) -> None:
        config = OLConfig()
        with pytest.raises(AttributeError):
            config.timeout = 1.0  # type: ignore[misc]

    def test_multiple_validation_errors(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            OLConfig(timeout=-1, cli_limit=0)
        assert "timeout" in str(exc_info.value)
        assert "cli_limit" in str(exc_info.value)


class TestOLConfigFromEnv:
    def test_reads_base_url_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_BASE_URL", "http://from-env:9999")
        assert OLConfig.from_env().base_url == "http://from-env:9999"

    def test_strips_trailing_slash(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_BASE_URL", "http://host:8080/")
        assert OLConfig.from_env().base_url == "http://host:8080"

    def test_strips_trailing_slash_from_override(self) -> None:
        assert OLConfig.from_env(base_url="http://host/").base_url == "http://host"

    def test_reads_timeout_and_limits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_TIMEOUT", "2.5")
        monkeypatch.setenv("OLSEARCH_CLI_LIMIT", "3")
        monkeypatch.setenv("OLSEARCH_GUI_LIMIT", "20")
        config = OLConfig.from_env()
        assert config.timeout == 2.5
        assert config.cli_limit == 3
        assert config.gui_limit == 20

    def test_invalid_timeout_env_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="OLSEARCH_TIMEOUT"):
            OLConfig.from_env()

    def test_invalid_limit_env_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_CLI_LIMIT", "five")
        with pytest.raises(ValueError, match="OLSEARCH_CLI_LIMIT"):
            OLConfig.from_env()

    def test_overrides_take_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_BASE_URL", "http://env-url:8080")
        config = OLConfig.from_env(base_url="http://override:9090")
        assert config.base_url == "http://override:9090"

    def test_verify_ssl_false(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_VERIFY_SSL", "no")
        assert OLConfig.from_env().verify_ssl is False

    def test_verify_ssl_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OLSEARCH_VERIFY_SSL", "/path/to/ca-bundle.crt")
        assert OLConfig.from_env().verify_ssl == "/path/to/ca-bundle.crt"

    def test_none_overrides_ignored(self) -> None:
        config = OLConfig.from_env(base_url=None, timeout=None)
        assert config.base_url == "https://openlibrary.org"
        assert config.timeout == 10.0
