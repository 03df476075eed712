"""Unit tests for configuration schema."""

import os

import pytest
from pydantic import ValidationError

from webstats.config import Config, get_config, reload_config


def make(**values) -> Config:
    return Config(_env_file=None, **values)


class TestConfigDefaults:

    def test_defaults(self):
        config = make()

        assert config.cache_backend == "chained"
        assert config.get_chained_backends() == ["array", "file"]
        assert config.enable_auto_update is True
        assert config.release_channel == "latest_stable"
        assert config.log_level == "INFO"

    def test_default_paths(self):
        config = make(path_root="/srv/webstats")

        assert config.get_tmp_path() == os.path.join("/srv/webstats", "tmp")
        assert config.get_file_cache_path() == os.path.join("/srv/webstats", "tmp", "cache", "tracker") + os.sep
        assert config.get_process_cache_path() == os.path.join("/srv/webstats", "tmp", "cache", "process") + os.sep

    def test_instance_id_is_appended_to_tmp_path(self):
        config = make(path_root="/srv/webstats", instance_id="customer1")
        assert config.get_tmp_path() == os.path.join("/srv/webstats", "tmp", "customer1")

    def test_explicit_cache_dirs_win(self):
        config = make(cache_file_dir="/var/cache/ws", cache_process_dir="/dev/shm/ws")
        assert config.get_file_cache_path() == "/var/cache/ws"
        assert config.get_process_cache_path() == "/dev/shm/ws"


class TestConfigValidation:

    def test_log_level_is_normalized(self):
        assert make(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            make(log_level="loud")

    def test_memory_size_bounds(self):
        with pytest.raises(ValidationError):
            make(cache_max_memory_size=0)

    def test_backend_name_is_normalized(self):
        assert make(cache_backend=" Redis ").cache_backend == "redis"

    def test_chained_backends_parsing(self):
        config = make(cache_chained_backends=" Array , ,file,redis ")
        assert config.get_chained_backends() == ["array", "file", "redis"]

    def test_valid_configuration_has_no_issues(self):
        assert make().validate_configuration() == []

    def test_unknown_backend_is_reported(self):
        issues = make(cache_backend="apc").validate_configuration()
        assert any("CACHE_BACKEND" in issue for issue in issues)

    def test_chained_cycle_is_reported(self):
        issues = make(cache_chained_backends="array,chained").validate_configuration()
        assert any("must not contain 'chained'" in issue for issue in issues)

    def test_unknown_chained_backend_is_reported(self):
        issues = make(cache_chained_backends="array,xcache").validate_configuration()
        assert any("xcache" in issue for issue in issues)

    def test_empty_chain_is_reported(self):
        issues = make(cache_chained_backends="").validate_configuration()
        assert any("empty" in issue for issue in issues)

    def test_invalid_redis_url_is_reported(self):
        issues = make(cache_backend="redis", cache_redis_url="localhost:6379").validate_configuration()
        assert any("CACHE_REDIS_URL" in issue for issue in issues)

    def test_unknown_release_channel_is_reported(self):
        issues = make(release_channel="nightly").validate_configuration()
        assert any("RELEASE_CHANNEL" in issue for issue in issues)


class TestConfigEnvironment:

    def test_config_from_env(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "file")
        monkeypatch.setenv("CACHE_CHAINED_BACKENDS", "array,redis")
        monkeypatch.setenv("ENABLE_AUTO_UPDATE", "false")
        monkeypatch.setenv("RELEASE_CHANNEL", "latest_beta")

        config = make()

        assert config.cache_backend == "file"
        assert config.get_chained_backends() == ["array", "redis"]
        assert config.enable_auto_update is False
        assert config.release_channel == "latest_beta"

    def test_get_config_returns_same_instance(self):
        assert get_config() is get_config()

    def test_reload_config_replaces_instance(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("CACHE_BACKEND", "null")

        second = reload_config()

        assert second is not first
        assert second.cache_backend == "null"
        assert get_config() is second
        reload_config()
