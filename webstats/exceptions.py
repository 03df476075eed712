"""Exceptions raised by the webstats core."""


class WebstatsError(Exception):
    """Base class for all webstats errors."""


class ConfigurationError(WebstatsError):
    """Raised when configuration cannot be turned into working components."""


class BackendUnavailableError(ConfigurationError):
    """Raised when a cache backend needs a library that is not installed."""

    def __init__(self, backend: str, package: str):
        self.backend = backend
        self.package = package
        super().__init__(
            f"Cache backend '{backend}' requires the '{package}' package, "
            f"install it with: pip install {package}"
        )
