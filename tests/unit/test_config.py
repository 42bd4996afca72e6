"""Unit tests for engine configuration."""

import logging

import pytest
import yaml
from pydantic import ValidationError

from ipgraph.config import EngineConfig, configure_logging, load_config
from ipgraph.data.source import FetchOptions


class TestLoadConfig:
    @pytest.fixture
    def config_path(self, tmp_path):
        return tmp_path / "config.yaml"

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in EngineConfig.model_fields:
            monkeypatch.delenv(f"IPGRAPH_{name.upper()}", raising=False)

    def test_missing_file_gives_defaults(self, config_path):
        config = load_config(config_path)
        assert config == EngineConfig()
        assert config.stale_time_seconds == 300
        assert config.fetch_retries == 2
        assert config.debounce_seconds == 0.15
        assert config.dim_opacity == 0.3

    def test_reads_engine_section(self, config_path):
        config_path.write_text(yaml.dump({
            "engine": {"stale_time_seconds": 60, "include_disputes": True},
            "other": {"ignored": True},
        }))
        config = load_config(config_path)
        assert config.stale_time_seconds == 60
        assert config.include_disputes is True
        assert config.fetch_retries == 2

    def test_empty_file(self, config_path):
        config_path.write_text("")
        assert load_config(config_path) == EngineConfig()

    def test_env_overrides_file(self, config_path, monkeypatch):
        config_path.write_text(yaml.dump({"engine": {"fetch_retries": 5}}))
        monkeypatch.setenv("IPGRAPH_FETCH_RETRIES", "1")
        monkeypatch.setenv("IPGRAPH_INCLUDE_SIBLINGS", "true")

        config = load_config(config_path)
        assert config.fetch_retries == 1
        assert config.include_siblings is True

    def test_invalid_values_rejected(self, config_path):
        config_path.write_text(yaml.dump({"engine": {"dim_opacity": 3}}))
        with pytest.raises(ValidationError):
            load_config(config_path)

    def test_non_mapping_section_rejected(self, config_path):
        config_path.write_text(yaml.dump({"engine": ["a", "b"]}))
        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(config_path)


class TestEngineConfig:
    def test_fetch_options(self):
        config = EngineConfig(default_max_depth=3, include_disputes=True)
        assert config.fetch_options() == FetchOptions(max_depth=3, include_disputes=True)


class TestConfigureLogging:
    def test_sets_level(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging("debug")
        assert calls["level"] == logging.DEBUG
        assert calls["format"] == "%(asctime)s %(levelname)s %(message)s"

    def test_unknown_level_falls_back_to_warning(self, monkeypatch):
        calls = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

        configure_logging("chatty")
        assert calls["level"] == logging.WARNING
