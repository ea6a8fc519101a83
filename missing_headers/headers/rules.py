"""
Header Presence Rules

Decides whether a configured header is missing from a header collection,
whether a request should skip header injection altogether, and fills in
missing headers in place.
"""

from collections.abc import Mapping
from enum import Enum

from starlette.datastructures import Headers, MutableHeaders


class CheckMode(str, Enum):
    """How strictly a header must be absent before it is injected."""

    # Add only when the header has no entry at all
    STRICT = "strict"
    # Add when the header has no entry or its value is empty
    LOOSE = "loose"

    @classmethod
    def from_strict(cls, strict_header_check: bool) -> "CheckMode":
        return cls.STRICT if strict_header_check else cls.LOOSE


def should_inject(headers: Headers, key: str, mode: CheckMode) -> bool:
    """
    Check whether a configured header should be written.

    Args:
        headers: Header collection to inspect (case-insensitive)
        key: Header name
        mode: Presence check mode

    Returns:
        bool: True if the header counts as missing under ``mode``
    """
    if mode == CheckMode.STRICT:
        return key not in headers
    # Headers.get returns the first value for repeated keys
    return headers.get(key, "") == ""


def should_bypass(headers: Headers, bypass_rules: Mapping[str, str]) -> bool:
    """
    Check whether any bypass rule matches the request headers.

    An empty expected value matches on presence alone (any value, including
    the empty string); any other value must equal the first header value
    exactly.

    Args:
        headers: Request headers
        bypass_rules: Mapping of header name to expected value

    Returns:
        bool: True on the first matching rule, False otherwise
    """
    for name, expected in bypass_rules.items():
        if expected == "":
            if name in headers:
                return True
        elif headers.get(name) == expected:
            return True
    return False


def add_missing_headers(
    headers: MutableHeaders, configured: Mapping[str, str], mode: CheckMode
) -> None:
    """
    Set every configured header that is missing from ``headers``.

    Setting replaces all existing entries for the key with a single value.
    """
    for key, value in configured.items():
        if should_inject(headers, key, mode):
            headers[key] = value
