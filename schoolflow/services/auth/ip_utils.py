"""
Client IP extraction from proxy headers.
"""

from typing import Mapping, Optional

DEFAULT_IP_ADDRESS = "127.0.0.1"

# Checked in this order; the first non-empty value wins
_IP_HEADERS = (
    "x-forwarded-for",
    "x-real-ip",
    "cf-connecting-ip",
    "x-client-ip",
)


def _get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        # Plain dicts are case sensitive, Starlette Headers are not
        for key, candidate in headers.items():
            if key.lower() == name:
                return candidate
    return value


def extract_ip_address(headers: Mapping[str, str]) -> str:
    """
    Determine the client IP address from request headers.

    ``x-forwarded-for`` may hold a chain ("client, proxy1, proxy2"); only
    the first entry is the client.

    Args:
        headers: Request headers (Starlette ``Headers`` or a plain dict)

    Returns:
        IP address string, "127.0.0.1" if no header is present
    """
    for name in _IP_HEADERS:
        value = _get_header(headers, name)
        if not value:
            continue
        if name == "x-forwarded-for":
            value = value.split(",")[0]
        value = value.strip()
        if value:
            return value

    return DEFAULT_IP_ADDRESS
