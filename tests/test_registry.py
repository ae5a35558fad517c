"""Tests for the process-wide config registry."""

import pytest

from steadcore.config import Settings
from steadcore.services.rules import ConfigRegistry, write_binary_snapshot
from steadcore.services.rules.registry import load_config_from_settings


class TestConfigRegistry:
    def test_initialize_once(self, config):
        registry = ConfigRegistry(loader=lambda: pytest.fail("loader should not run"))
        assert registry.initialize(config) is config
        assert registry.get() is config
        assert registry.is_initialized

    def test_second_initialize_rejected(self, config):
        registry = ConfigRegistry()
        registry.initialize(config)
        with pytest.raises(RuntimeError):
            registry.initialize(config)

    def test_lazy_load_runs_once(self, config):
        calls = []

        def loader():
            calls.append(1)
            return config

        registry = ConfigRegistry(loader=loader)
        assert not registry.is_initialized
        assert registry.get() is config
        assert registry.get() is config
        assert calls == [1]

    def test_initialize_after_lazy_load_rejected(self, config):
        registry = ConfigRegistry(loader=lambda: config)
        registry.get()
        with pytest.raises(RuntimeError):
            registry.initialize(config)

    def test_reentrant_load_rejected(self, config):
        registry = ConfigRegistry(loader=lambda: registry.get())
        with pytest.raises(RuntimeError, match="being loaded"):
            registry.get()
        assert not registry.is_initialized

    def test_failed_load_can_be_retried(self, config):
        attempts = []

        def loader():
            attempts.append(1)
            if len(attempts) == 1:
                raise OSError("content not there yet")
            return config

        registry = ConfigRegistry(loader=loader)
        with pytest.raises(OSError):
            registry.get()
        assert registry.get() is config


class TestLoadFromSettings:
    def test_yaml_source(self, content_dir):
        settings = Settings(CONFIG_PATH=str(content_dir), CONFIG_SOURCE="yaml")
        config = load_config_from_settings(settings)
        assert len(config.possession_archetypes) == 6

    def test_snapshot_source(self, config, content_dir):
        write_binary_snapshot(config, content_dir / "config.bin.gz")
        settings = Settings(CONFIG_PATH=str(content_dir))
        assert load_config_from_settings(settings).model_dump() == config.model_dump()

    def test_missing_snapshot(self, tmp_path):
        settings = Settings(CONFIG_PATH=str(tmp_path))
        with pytest.raises(FileNotFoundError):
            load_config_from_settings(settings)
