# ABOUTME: Contract tests for the JSON-file config store and environment settings.
# ABOUTME: Validates defaults for missing files, save/load, and errors on corrupt documents.

import pytest

from current_weather import config_store
from current_weather.config_store import ConfigStore, ConfigStoreError, load_settings
from current_weather.models import ModuleConfig, Units


class TestConfigStore:
    def test_missing_file_yields_default(self, tmp_path):
        """Loading before anything is saved returns the default disabled config.

        Implementation: Loads from a path that does not exist.
        Passing implies: A fresh install starts disabled instead of failing.
        """
        assert ConfigStore(tmp_path / "missing.json").load() == ModuleConfig()

    def test_save_then_load(self, tmp_path, enabled_config):
        """A saved config is read back unchanged.

        Implementation: Saves into a nested directory and loads it again.
        Passing implies: Settings survive restarts and parent directories are created.
        """
        store = ConfigStore(tmp_path / "nested" / "config.json")
        config = enabled_config.model_copy(update={"units": Units.IMPERIAL})
        store.save(config)

        assert store.load() == config
        assert [p.name for p in store.path.parent.iterdir()] == ["config.json"]

    def test_failed_save_leaves_no_temp_file(self, tmp_path, monkeypatch, enabled_config):
        """A save that fails at the rename step raises ConfigStoreError and removes its temp file.

        Implementation: Patches os.replace in the store module to raise OSError.
        Passing implies: Failed writes do not litter the config directory or clobber the old file.
        """
        store = ConfigStore(tmp_path / "config.json")

        def _fail_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr(config_store.os, "replace", _fail_replace)
        with pytest.raises(ConfigStoreError):
            store.save(enabled_config)

        assert list(tmp_path.iterdir()) == []

    def test_corrupt_file_raises(self, tmp_path):
        """An unparseable document raises ConfigStoreError.

        Implementation: Writes invalid JSON and loads it.
        Passing implies: Corruption is reported rather than silently reset.
        """
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigStoreError):
            ConfigStore(path).load()


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch):
        """Process settings come from environment variables.

        Implementation: Sets the variables with monkeypatch and loads settings.
        Passing implies: Deployments configure paths and tokens without code changes.
        """
        monkeypatch.setenv("CURRENT_WEATHER_CONFIG", "/tmp/cw.json")
        monkeypatch.setenv("CURRENT_WEATHER_ADMIN_TOKEN", "tok")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.config_path == "/tmp/cw.json"
        assert settings.admin_token == "tok"
        assert settings.log_level == "DEBUG"
