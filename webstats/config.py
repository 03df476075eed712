"""Configuration management using Pydantic BaseSettings.

Settings are read from the environment (and an optional ``.env`` file) with
validation and sensible defaults. Components never look the configuration up
themselves: the application builds one ``Config`` and hands it to the cache
registry and the update checker.
"""
import os
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

CACHE_BACKEND_NAMES = ["null", "array", "file", "process", "redis", "chained"]
RELEASE_CHANNEL_NAMES = ["latest_stable", "latest_beta", "2x_stable", "2x_beta"]


class Config(BaseSettings):
    """Main configuration class combining all settings."""

    # Paths
    path_root: str = Field(".", description="Root directory of the installation")
    instance_id: str = Field("", description="Instance id appended to the tmp path on multi-instance setups")

    # Cache Configuration
    cache_backend: str = Field("chained", description="Cache backend: null, array, file, process, redis, chained")
    cache_chained_backends: str = Field("array,file", description="Comma-separated backends queried by the chained backend, in order")
    cache_file_dir: str = Field("", description="File cache directory (defaults to <tmp>/cache/tracker/)")
    cache_process_dir: str = Field("", description="Process cache directory (defaults to <tmp>/cache/process/)")
    cache_redis_url: str = Field("redis://localhost:6379/0", description="Redis connection URL")
    cache_redis_key_prefix: str = Field("webstats:", description="Prefix for every Redis key")
    cache_max_memory_size: int = Field(1000, ge=1, le=1000000, description="Max entries held by the array backend")

    # Update Check Configuration
    enable_auto_update: bool = Field(True, description="Check periodically for a newer release")
    release_channel: str = Field("latest_stable", description="Release channel used for update checks")
    api_service_url: str = Field("https://api.webstats.org", description="Base URL of the version service")
    builds_url: str = Field("https://builds.webstats.org", description="Base URL of release archives")
    site_url: str = Field("", description="Public URL of this installation, reported with update checks")

    # Logging Configuration
    log_level: str = Field("INFO", description="Logging level")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }

    @field_validator('log_level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Invalid log level: {v}. Valid options: {valid_levels}')
        return v.upper()

    @field_validator('cache_backend')
    @classmethod
    def normalize_backend(cls, v):
        return v.strip().lower()

    def get_chained_backends(self) -> List[str]:
        """Parse and return the chained backend names in order."""
        return [name.strip().lower() for name in self.cache_chained_backends.split(",") if name.strip()]

    def get_tmp_path(self) -> str:
        """Return the tmp directory, suffixed with the instance id when set."""
        tmp_path = os.path.join(self.path_root, "tmp")
        if self.instance_id:
            tmp_path = os.path.join(tmp_path, self.instance_id)
        return tmp_path

    def get_file_cache_path(self) -> str:
        """Return the directory used by the file backend."""
        if self.cache_file_dir:
            return self.cache_file_dir
        return os.path.join(self.get_tmp_path(), "cache", "tracker") + os.sep

    def get_process_cache_path(self) -> str:
        """Return the directory shared by the process backend."""
        if self.cache_process_dir:
            return self.cache_process_dir
        return os.path.join(self.get_tmp_path(), "cache", "process") + os.sep

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any issues."""
        issues = []

        backend = self.cache_backend or "chained"
        if backend not in CACHE_BACKEND_NAMES:
            issues.append(f"CACHE_BACKEND must be one of: {', '.join(CACHE_BACKEND_NAMES)}")

        chained = self.get_chained_backends()
        for name in chained:
            if name not in CACHE_BACKEND_NAMES:
                issues.append(f"CACHE_CHAINED_BACKENDS contains unknown backend '{name}'")
        if "chained" in chained:
            issues.append("CACHE_CHAINED_BACKENDS must not contain 'chained'")
        if backend == "chained" and not chained:
            issues.append("CACHE_CHAINED_BACKENDS is empty, the chained cache will never store anything")

        uses_redis = backend == "redis" or (backend == "chained" and "redis" in chained)
        if uses_redis and not self.cache_redis_url.startswith(("redis://", "rediss://", "unix://")):
            issues.append("CACHE_REDIS_URL must be a valid Redis URL (redis://...)")

        if self.release_channel not in RELEASE_CHANNEL_NAMES:
            issues.append(f"RELEASE_CHANNEL '{self.release_channel}' is unknown, latest_stable will be used")

        return issues

    def log_configuration(self) -> None:
        """Log the current configuration (sanitized)."""
        from webstats.utils.logger import log_info

        log_info("Configuration loaded",
                 cache_backend=self.cache_backend,
                 cache_chained_backends=self.get_chained_backends(),
                 file_cache_path=self.get_file_cache_path(),
                 cache_redis_url=self.cache_redis_url,
                 enable_auto_update=self.enable_auto_update,
                 release_channel=self.release_channel,
                 log_level=self.log_level)


# Global configuration instance (lazy loading)
_config = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reload_config() -> Config:
    """Reload configuration from environment variables."""
    global _config
    _config = Config()
    return _config
