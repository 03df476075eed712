"""webstats runtime core: cache backends and update checks."""

from webstats.version import VERSION

__version__ = VERSION
