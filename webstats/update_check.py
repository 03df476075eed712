"""Periodic check for a newer webstats release.

The checker asks the version service at most once per interval and stores the
answer in the option store. Checks can be triggered from any request, so the
last-checked timestamp is written before the HTTP request goes out: concurrent
requests that read it afterwards skip their own check. This narrows the window
for duplicate requests but does not close it.

A failed or malformed response is stored as an empty version, which replaces
any version found by an earlier check until the next successful one.
"""
import platform
import re
import time
from enum import Enum
from typing import Callable, Optional
from urllib.parse import urlencode

from webstats.config import Config
from webstats.http import send_http_request
from webstats.options import OptionStore
from webstats.utils.logger import log_debug, log_info, log_warning
from webstats.version import VERSION, is_newer_version

CHECK_INTERVAL = 28800  # every 8 hours
UI_CLICK_CHECK_INTERVAL = 10  # when a user asks for a check from the UI
LAST_TIME_CHECKED = "UpdateCheck_LastTimeChecked"
LATEST_VERSION = "UpdateCheck_LatestVersion"
SOCKET_TIMEOUT = 2

# Must start with a digit; \Z so a trailing newline is rejected too.
VERSION_PATTERN = re.compile(r"^[0-9][0-9a-zA-Z_.-]*\Z")


class ReleaseChannel(str, Enum):
    """Update distribution tracks."""

    LATEST_STABLE = "latest_stable"
    LATEST_BETA = "latest_beta"
    STABLE_2X = "2x_stable"
    BETA_2X = "2x_beta"

    @classmethod
    def from_setting(cls, value: Optional[str]) -> "ReleaseChannel":
        """Return the channel for a configured value, latest_stable if invalid."""
        try:
            return cls(value)
        except ValueError:
            return cls.LATEST_STABLE


DEFAULT_RELEASE_CHANNEL = ReleaseChannel.LATEST_STABLE


def is_valid_release_channel(value: Optional[str]) -> bool:
    return value in {channel.value for channel in ReleaseChannel}


def is_valid_version_string(value: str) -> bool:
    """Return True if a version service response looks like a version number."""
    return isinstance(value, str) and VERSION_PATTERN.match(value) is not None


def _utc_timezone() -> str:
    return "UTC"


class UpdateChecker:
    """Check for and report newer releases.

    Args:
        config: Settings providing the feature flag, release channel and URLs
        options: Store holding the last check time and latest version
        http_get: Callable issuing a GET ``(url, timeout) -> body``
        timezone_provider: Callable returning the default site timezone
        clock: Callable returning the current epoch time
        current_version: Version of the running installation
    """

    def __init__(self,
                 config: Config,
                 options: OptionStore,
                 http_get: Callable[[str, float], str] = send_http_request,
                 timezone_provider: Callable[[], str] = _utc_timezone,
                 clock: Callable[[], float] = time.time,
                 current_version: str = VERSION):
        self.config = config
        self.options = options
        self.http_get = http_get
        self.timezone_provider = timezone_provider
        self.clock = clock
        self.current_version = current_version

    def is_auto_update_enabled(self) -> bool:
        return bool(self.config.enable_auto_update)

    def get_release_channel(self) -> ReleaseChannel:
        return ReleaseChannel.from_setting(self.config.release_channel)

    def get_archive_url_for_release_channel(self, version: str) -> str:
        """Return the download URL of the release archive for the configured channel."""
        builds_url = self.config.builds_url.rstrip("/")
        channel = self.get_release_channel()

        if channel is ReleaseChannel.LATEST_BETA:
            return f"{builds_url}/webstats-{version}.zip"
        if channel is ReleaseChannel.STABLE_2X:
            return f"{builds_url}/webstats2x.zip"
        if channel is ReleaseChannel.BETA_2X:
            return f"{builds_url}/webstats2x-{version}.zip"
        return f"{builds_url}/webstats.zip"

    def get_url_to_check_for_latest_version(self, trigger: str = "") -> str:
        """Build the URL queried for the latest version.

        Beta channels read a static file; stable channels ask the version
        service, reporting details of this installation.
        """
        channel = self.get_release_channel()
        builds_url = self.config.builds_url.rstrip("/")

        if channel is ReleaseChannel.BETA_2X:
            return f"{builds_url}/LATEST_2X_BETA"
        if channel is ReleaseChannel.LATEST_BETA:
            return f"{builds_url}/LATEST_BETA"

        parameters = {
            "webstats_version": self.current_version,
            "python_version": platform.python_version(),
            "release_channel": channel.value,
            "url": self.config.site_url,
            "trigger": trigger,
            "timezone": self.timezone_provider(),
        }
        return (self.config.api_service_url.rstrip("/")
                + "/1.0/getLatestVersion/?"
                + urlencode(parameters))

    def _get_last_time_checked(self) -> Optional[int]:
        value = self.options.get(LAST_TIME_CHECKED)
        if value is None:
            return None
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            return None

    def check(self, force: bool = False, interval: Optional[int] = None, trigger: str = "") -> bool:
        """Check for a newer version if the interval has elapsed.

        Args:
            force: Check even if the last check is recent
            interval: Minimum seconds between checks, CHECK_INTERVAL by default
            trigger: Name of what triggered the check, reported to the service

        Returns:
            True if a request to the version service was made
        """
        if not self.is_auto_update_enabled():
            return False

        if interval is None:
            interval = CHECK_INTERVAL

        now = int(self.clock())
        last_time_checked = self._get_last_time_checked()
        if not (force
                or last_time_checked is None
                or now - interval > last_time_checked):
            log_debug("Skipping update check", last_time_checked=last_time_checked, interval=interval)
            return False

        # Claim this check before the request so parallel requests skip theirs
        self.options.set(LAST_TIME_CHECKED, now, autoload=True)

        url = self.get_url_to_check_for_latest_version(trigger)
        log_info("Checking for latest version",
                 release_channel=self.get_release_channel().value,
                 trigger=trigger, forced=force)

        try:
            latest_version = self.http_get(url, SOCKET_TIMEOUT)
        except Exception as e:
            log_warning("Update check failed", error=str(e))
            latest_version = ""

        if not is_valid_version_string(latest_version):
            if latest_version:
                log_warning("Ignoring invalid version response", response=str(latest_version)[:100])
            latest_version = ""

        self.options.set(LATEST_VERSION, latest_version, autoload=True)
        return True

    def get_latest_version(self) -> Optional[str]:
        """Return the last version found, without checking for a newer one."""
        return self.options.get(LATEST_VERSION)

    def is_newest_version_available(self) -> Optional[str]:
        """Return the latest version if it is newer than the running one, else None."""
        latest_version = self.get_latest_version()
        if latest_version and is_newer_version(latest_version, self.current_version):
            return latest_version
        return None
