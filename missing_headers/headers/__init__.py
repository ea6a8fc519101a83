"""
Headers Package

Header presence, bypass and injection rules.
"""

from missing_headers.headers.rules import (
    CheckMode,
    add_missing_headers,
    should_bypass,
    should_inject,
)

__all__ = ["CheckMode", "add_missing_headers", "should_bypass", "should_inject"]
