"""Outbound HTTP helper."""
import requests

from webstats.version import VERSION

USER_AGENT = f"webstats/{VERSION}"


def send_http_request(url: str, timeout: float) -> str:
    """Issue a GET request and return the response body as text.

    Raises:
        requests.RequestException: On transport errors and non-2xx responses
    """
    response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
    response.raise_for_status()
    return response.text
